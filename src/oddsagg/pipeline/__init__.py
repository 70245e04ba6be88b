"""Normalization pipeline: raw provider payloads -> canonical records."""

from oddsagg.pipeline.matching import EventMatcher, MatchResult, normalize_team_name
from oddsagg.pipeline.normalize import NormalizedBatch, normalize_payload, valid_odds
from oddsagg.pipeline.payloads import RawPayload, StaticPayload, WalAppPayload, WurlusPayload, parse_raw_payload
from oddsagg.pipeline.sports import classify_sport

__all__ = [
    "EventMatcher",
    "MatchResult",
    "NormalizedBatch",
    "RawPayload",
    "StaticPayload",
    "WalAppPayload",
    "WurlusPayload",
    "classify_sport",
    "normalize_payload",
    "normalize_team_name",
    "parse_raw_payload",
    "valid_odds",
]
