"""Core ledger, hypothesis resolution and audit trail.

ResourceTracker lives in core.tracker and is exported from the top-level
package; it depends on the ingest layer, which depends on this module.
"""

from .resources import (
    RESOURCE_KINDS,
    ResourceKind,
    ResourceVector,
    StructureKind,
)
from .ledger import LedgerStore
from .narrator import EventNarrator, EventRecord
from .resolver import (
    AmbiguityResolver,
    CandidateDelta,
    HypothesisSummary,
    ReviewOutcome,
    ReviewStatus,
)
from .aliases import PlayerAliasResolver
from .rules_config import TrackerConfig, load_tracker_config, load_tracker_config_file

__all__ = [
    "RESOURCE_KINDS",
    "ResourceKind",
    "ResourceVector",
    "StructureKind",
    "LedgerStore",
    "EventNarrator",
    "EventRecord",
    "AmbiguityResolver",
    "CandidateDelta",
    "HypothesisSummary",
    "ReviewOutcome",
    "ReviewStatus",
    "PlayerAliasResolver",
    "TrackerConfig",
    "load_tracker_config",
    "load_tracker_config_file",
]
