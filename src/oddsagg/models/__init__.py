"""Canonical schema (Pydantic) - Sport, Event, Market, Outcome, OddsQuote."""

from oddsagg.models.event import Event, EventStatus, Market, MarketStatus, Outcome, OutcomeStatus
from oddsagg.models.quote import OddsQuote, ProviderInfo
from oddsagg.models.sport import SPORTS_BY_ID, SPORTS_BY_SLUG, SPORTS_CATALOG, UNKNOWN_SPORT, UNKNOWN_SPORT_ID, Sport

__all__ = [
    "Event",
    "EventStatus",
    "Market",
    "MarketStatus",
    "Outcome",
    "OutcomeStatus",
    "OddsQuote",
    "ProviderInfo",
    "Sport",
    "SPORTS_CATALOG",
    "SPORTS_BY_ID",
    "SPORTS_BY_SLUG",
    "UNKNOWN_SPORT",
    "UNKNOWN_SPORT_ID",
]
