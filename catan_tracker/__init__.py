"""Catan card tracker: per-player resource ledger built from the game log."""

from .core.tracker import LedgerContradictionError, ResourceTracker, track_records

__version__ = "0.1.0"

__all__ = [
    "LedgerContradictionError",
    "ResourceTracker",
    "track_records",
]
