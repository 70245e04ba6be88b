"""Consensus aggregation, snapshots and odds movement history."""

from oddsagg.aggregation.aggregator import Aggregator, Consensus, weighted_average
from oddsagg.aggregation.history import OddsHistory
from oddsagg.aggregation.snapshot import Snapshot, SnapshotHolder

__all__ = ["Aggregator", "Consensus", "OddsHistory", "Snapshot", "SnapshotHolder", "weighted_average"]
