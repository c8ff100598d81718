"""
Tracker rules configuration.

Loaded from a plain dict (usually the parsed contents of a YAML file).
With no arguments, TrackerConfig reproduces the standard game: default
synonyms, standard build costs, a 100-entry audit trail and lenient
handling of contradictions.

Example YAML:

    audit_capacity: 200
    strict: true
    username: Alice
    resource_synonyms:
      wheat: [grain, wheat, corn]
    build_costs:
      city: {ore: 3, wheat: 2}
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .narrator import DEFAULT_CAPACITY
from .resources import (
    DEFAULT_BUILD_COSTS,
    DEFAULT_RESOURCE_SYNONYMS,
    ResourceKind,
    ResourceVector,
    StructureKind,
)


@dataclass
class TrackerConfig:
    """Resolved tracker configuration."""
    audit_capacity: int = DEFAULT_CAPACITY
    strict: bool = False
    username: Optional[str] = None
    resource_synonyms: dict[ResourceKind, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_RESOURCE_SYNONYMS)
    )
    build_costs: dict[StructureKind, ResourceVector] = field(
        default_factory=lambda: dict(DEFAULT_BUILD_COSTS)
    )


def load_tracker_config(data: Optional[dict]) -> TrackerConfig:
    """Build a TrackerConfig from a dict; missing keys keep their defaults.

    Synonym and cost entries are merged over the defaults per kind, so a
    config only needs to list what it changes.
    """
    if not data:
        return TrackerConfig()

    config = TrackerConfig(
        audit_capacity=int(data.get("audit_capacity", DEFAULT_CAPACITY)),
        strict=bool(data.get("strict", False)),
        username=data.get("username"),
    )

    for kind_name, words in (data.get("resource_synonyms") or {}).items():
        kind = ResourceKind(str(kind_name).lower())
        if isinstance(words, str):
            words = [words]
        config.resource_synonyms[kind] = tuple(str(w).lower() for w in words)

    for structure_name, cost in (data.get("build_costs") or {}).items():
        structure = StructureKind(str(structure_name).lower())
        config.build_costs[structure] = ResourceVector.from_dict(cost or {})

    if config.audit_capacity < 1:
        raise ValueError("audit_capacity must be at least 1")
    return config


def load_tracker_config_file(path: str | Path) -> TrackerConfig:
    """Load a TrackerConfig from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Tracker config must be a mapping: {path}")
    return load_tracker_config(data)
