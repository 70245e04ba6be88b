"""Sport catalog - static, immutable for the process lifetime."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_SPORT_ID = 0


class Sport(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    slug: str = Field(..., pattern=r"^[a-z0-9_-]+$")
    active: bool = True


SPORTS_CATALOG: tuple[Sport, ...] = (
    Sport(id=1, name="Football", slug="football"),
    Sport(id=2, name="Basketball", slug="basketball"),
    Sport(id=3, name="Tennis", slug="tennis"),
    Sport(id=4, name="Baseball", slug="baseball"),
    Sport(id=5, name="Hockey", slug="hockey"),
    Sport(id=6, name="Handball", slug="handball"),
    Sport(id=7, name="Volleyball", slug="volleyball"),
    Sport(id=8, name="Rugby", slug="rugby"),
    Sport(id=9, name="Cricket", slug="cricket"),
    Sport(id=10, name="Golf", slug="golf"),
    Sport(id=11, name="Boxing", slug="boxing"),
    Sport(id=12, name="MMA/UFC", slug="mma-ufc"),
    Sport(id=13, name="Formula 1", slug="formula_1"),
    Sport(id=14, name="Cycling", slug="cycling"),
    Sport(id=15, name="American Football", slug="american_football"),
    Sport(id=16, name="Australian Football", slug="afl"),
    Sport(id=17, name="Snooker", slug="snooker"),
    Sport(id=18, name="Darts", slug="darts"),
    Sport(id=19, name="Table Tennis", slug="table-tennis"),
    Sport(id=20, name="Badminton", slug="badminton"),
)

UNKNOWN_SPORT = Sport(id=UNKNOWN_SPORT_ID, name="Unknown", slug="unknown", active=False)

SPORTS_BY_ID: dict[int, Sport] = {s.id: s for s in SPORTS_CATALOG}
SPORTS_BY_SLUG: dict[str, Sport] = {s.slug: s for s in SPORTS_CATALOG}
