"""Cross-provider event identity matching."""

from oddsagg.pipeline.matching import EventMatcher, normalize_team_name

from fakes import batch_for, raw_event


def _events(*batches):
    return [e for b in batches for e in b.events]


def test_normalize_team_name():
    assert normalize_team_name("FC Barcelona") == "barcelona"
    assert normalize_team_name("Atlético  Madrid") == "atletico madrid"
    assert normalize_team_name("The Brentford F.C.") == "brentford f c"
    assert normalize_team_name("") == ""


def test_match_by_teams_and_time_window():
    x = batch_for("x", [raw_event("e1", home="Arsenal FC")])
    y = batch_for("y", [raw_event("77", start="2026-11-01T15:03:00Z")])
    result = EventMatcher(time_tolerance_sec=300).match(_events(x, y))
    assert list(result.events) == ["x:e1"]
    assert result.event_ids["y:77"] == "x:e1"
    assert result.outcome_ids["y:77:match-winner:home"] == "x:e1:match-winner:home"
    merged = result.events["x:e1"]
    assert merged.provider_ids == ("x", "y")
    assert len(merged.markets) == 1
    assert len(merged.markets[0].outcomes) == 3


def test_outside_time_window_stays_separate():
    x = batch_for("x", [raw_event("e1")])
    y = batch_for("y", [raw_event("e1", start="2026-11-01T16:00:00Z")])
    result = EventMatcher(time_tolerance_sec=300).match(_events(x, y))
    assert set(result.events) == {"x:e1", "y:e1"}


def test_match_by_external_id_ignores_names():
    x = batch_for("x", [raw_event("e1", externalId="fx-1")])
    y = batch_for("y", [raw_event("e9", home="Gunners", away="Blues", externalId="fx-1", start="2026-11-01T18:00:00Z")])
    result = EventMatcher().match(_events(x, y))
    assert list(result.events) == ["x:e1"]
    assert result.event_ids["y:e9"] == "x:e1"


def test_same_provider_never_merges_with_itself():
    x = batch_for("x", [raw_event("e1"), raw_event("e2")])
    result = EventMatcher().match(_events(x))
    assert set(result.events) == {"x:e1", "x:e2"}


def test_ambiguous_candidates_coexist():
    x = batch_for("x", [raw_event("e1"), raw_event("e2")])
    y = batch_for("y", [raw_event("e3")])
    result = EventMatcher().match(_events(x, y))
    assert set(result.events) == {"x:e1", "x:e2", "y:e3"}
    assert result.event_ids["y:e3"] == "y:e3"


def test_new_market_and_outcomes_are_added_to_canonical_event():
    x = batch_for("x", [raw_event("e1", odds={"home": 2.0})])
    other = raw_event("e5", odds={"home": 2.1, "away": 3.0})
    other["markets"].append(
        {"id": "ou", "name": "Total Goals", "outcomes": [{"name": "Over 2.5", "odds": 1.8}]}
    )
    y = batch_for("y", [other])
    merged = EventMatcher().match(_events(x, y)).events["x:e1"]
    assert [m.key for m in merged.markets] == ["match-winner", "total-goals"]
    assert [o.key for o in merged.markets[0].outcomes] == ["home", "away"]
    assert merged.markets[1].id == "x:e1:total-goals"
    assert merged.markets[1].outcomes[0].id == "x:e1:total-goals:over-2-5"


def test_known_aliases_keep_canonical_id():
    x = batch_for("x", [raw_event("e1")])
    y = batch_for("y", [raw_event("77")])
    matcher = EventMatcher()
    first = matcher.match(_events(x, y))
    aliases = {k: v for k, v in first.event_ids.items() if k != v}
    # x drops out; y alone still maps onto the first claimant's id
    second = matcher.match(_events(y), known_aliases=aliases)
    assert list(second.events) == ["x:e1"]
    assert second.events["x:e1"].provider_ids == ("y",)
    assert second.outcome_ids["y:77:match-winner:draw"] == "x:e1:match-winner:draw"


def test_remap_quote_rewrites_ids():
    x = batch_for("x", [raw_event("e1")])
    y = batch_for("y", [raw_event("77")])
    result = EventMatcher().match(_events(x, y))
    quote = result.remap_quote(y.quotes[0])
    assert quote.event_id == "x:e1"
    assert quote.market_id == "x:e1:match-winner"
    assert quote.outcome_id == "x:e1:match-winner:home"
    assert quote.provider_id == "y"
    assert result.remap_quote(x.quotes[0]) == x.quotes[0]


def test_event_whose_id_is_taken_by_an_alias_is_folded_in():
    y = batch_for("y", [raw_event("77")])
    other = raw_event("e1", home="Milan", away="Roma", odds={"home": 1.9})
    other["markets"].append(
        {"id": "ou", "name": "Total Goals", "outcomes": [{"name": "Over 2.5", "odds": 1.8}]}
    )
    x = batch_for("x", [other])
    result = EventMatcher().match(_events(y, x), known_aliases={"y:77": "x:e1"})
    assert list(result.events) == ["x:e1"]
    merged = result.events["x:e1"]
    assert merged.provider_ids == ("y", "x")
    assert [m.key for m in merged.markets] == ["match-winner", "total-goals"]
    assert result.event_ids["x:e1"] == "x:e1"
    outcome_ids = {o.id for m in merged.markets for o in m.outcomes}
    assert {result.remap_quote(q).outcome_id for q in x.quotes} <= outcome_ids
