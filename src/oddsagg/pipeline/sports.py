"""Sport classification for raw records that may lack a sport identifier.

Explicit ids and slugs win. Otherwise league and participant names are scored
against keyword lists; only a unique best score is accepted, anything else is
classified as unknown.
"""

from __future__ import annotations

import re
from typing import Any

from oddsagg.models.sport import SPORTS_BY_ID, SPORTS_BY_SLUG, UNKNOWN_SPORT_ID

# Provider spellings -> catalog slug
SPORT_ALIASES: dict[str, str] = {
    "soccer": "football",
    "football": "football",
    "basketball": "basketball",
    "tennis": "tennis",
    "baseball": "baseball",
    "hockey": "hockey",
    "ice-hockey": "hockey",
    "icehockey": "hockey",
    "ice_hockey": "hockey",
    "handball": "handball",
    "volleyball": "volleyball",
    "rugby": "rugby",
    "rugby-union": "rugby",
    "rugby-league": "rugby",
    "cricket": "cricket",
    "golf": "golf",
    "boxing": "boxing",
    "mma": "mma-ufc",
    "ufc": "mma-ufc",
    "mma-ufc": "mma-ufc",
    "formula1": "formula_1",
    "formula-1": "formula_1",
    "formula_1": "formula_1",
    "f1": "formula_1",
    "cycling": "cycling",
    "american-football": "american_football",
    "american_football": "american_football",
    "americanfootball": "american_football",
    "nfl": "american_football",
    "afl": "afl",
    "aussie-rules": "afl",
    "australian-football": "afl",
    "snooker": "snooker",
    "darts": "darts",
    "table-tennis": "table-tennis",
    "table_tennis": "table-tennis",
    "tabletennis": "table-tennis",
    "badminton": "badminton",
}

LEAGUE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "football": (
        "premier league", "la liga", "serie a", "bundesliga", "ligue 1", "eredivisie",
        "champions league", "europa league", "conference league", "mls", "copa",
        "fa cup", "efl", "league one", "league two", "primeira liga", "super lig",
    ),
    "basketball": ("nba", "wnba", "euroleague", "ncaab", "acb", "basketball"),
    "tennis": ("atp", "wta", "itf", "challenger", "wimbledon", "roland garros", "us open", "australian open"),
    "baseball": ("mlb", "npb", "kbo", "baseball"),
    "hockey": ("nhl", "khl", "shl", "ahl", "hockey"),
    "handball": ("handball", "ehf"),
    "volleyball": ("volleyball", "cev", "superlega"),
    "rugby": ("rugby", "six nations", "super rugby", "nrl", "pro14", "urc", "top 14"),
    "cricket": ("ipl", "t20", "odi", "test series", "big bash", "cricket", "county championship"),
    "golf": ("pga", "lpga", "dp world tour", "ryder cup", "masters", "golf"),
    "boxing": ("boxing", "wbc", "wba", "ibf", "wbo", "bout"),
    "mma-ufc": ("ufc", "bellator", "mma", "pfl", "one championship"),
    "formula_1": ("formula 1", "formula one", "f1", "grand prix"),
    "cycling": ("tour de france", "giro", "vuelta", "cycling"),
    "american_football": ("nfl", "ncaaf", "cfl", "xfl"),
    "afl": ("afl", "aussie rules"),
    "snooker": ("snooker", "world snooker"),
    "darts": ("pdc", "darts", "premier league darts"),
    "table-tennis": ("table tennis", "ittf", "wtt"),
    "badminton": ("badminton", "bwf"),
}

PARTICIPANT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "football": ("fc", "cf", "afc", "united", "city", "athletic", "sporting", "real"),
    "rugby": ("rugby", "rfc", "sharks", "warriors", "broncos"),
    "hockey": ("hc",),
    "basketball": ("bc", "bk"),
}

# Both participants carrying one of these rules out rugby and boxing
FOOTBALL_MARKERS = ("fc", "united")
FOOTBALL_EXCLUDES = ("rugby", "boxing")

_pattern_cache: dict[str, re.Pattern[str]] = {}


def _word_pattern(keyword: str) -> re.Pattern[str]:
    pat = _pattern_cache.get(keyword)
    if pat is None:
        pat = re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"(?![a-z0-9])")
        _pattern_cache[keyword] = pat
    return pat


def _has_word(text: str, keyword: str) -> bool:
    return bool(_word_pattern(keyword).search(text))


def sport_id_from_hint(hint: Any) -> int | None:
    """Resolve an explicit provider sport identifier (numeric id, slug or alias)."""
    if hint is None or isinstance(hint, bool):
        return None
    if isinstance(hint, (int, float)):
        sid = int(hint)
        return sid if sid in SPORTS_BY_ID else None
    text = str(hint).strip().lower()
    if not text:
        return None
    if text.isdigit():
        sid = int(text)
        return sid if sid in SPORTS_BY_ID else None
    key = re.sub(r"\s+", "-", text)
    slug = SPORT_ALIASES.get(key) or (key if key in SPORTS_BY_SLUG else None)
    if slug is None:
        return None
    return SPORTS_BY_SLUG[slug].id


def classify_sport(
    sport_hint: Any = None,
    league: str | None = None,
    home_team: str | None = None,
    away_team: str | None = None,
) -> int:
    """Return a catalog sport id, or UNKNOWN_SPORT_ID when no rule matches confidently."""
    explicit = sport_id_from_hint(sport_hint)
    if explicit is not None:
        return explicit

    league_text = (league or "").lower()
    home = (home_team or "").lower()
    away = (away_team or "").lower()

    scores: dict[str, int] = {}
    for slug, keywords in LEAGUE_KEYWORDS.items():
        hits = sum(1 for kw in keywords if _has_word(league_text, kw))
        if hits:
            scores[slug] = scores.get(slug, 0) + 2 * hits
    for slug, keywords in PARTICIPANT_KEYWORDS.items():
        hits = sum(1 for kw in keywords for name in (home, away) if _has_word(name, kw))
        if hits:
            scores[slug] = scores.get(slug, 0) + hits

    if home and away and all(
        any(_has_word(name, marker) for marker in FOOTBALL_MARKERS) for name in (home, away)
    ):
        for slug in FOOTBALL_EXCLUDES:
            scores.pop(slug, None)

    if not scores:
        return UNKNOWN_SPORT_ID
    best = max(scores.values())
    leaders = [slug for slug, score in scores.items() if score == best]
    if len(leaders) != 1:
        return UNKNOWN_SPORT_ID
    return SPORTS_BY_SLUG[leaders[0]].id
