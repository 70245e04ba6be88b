"""OddsAgg - multi-provider sports odds aggregation."""

__version__ = "0.1.0"
