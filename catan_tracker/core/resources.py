"""
Resource kinds, structure costs and the fixed-arity ResourceVector.

The order of ResourceKind is the index basis for every vector and every
hypothesis matrix in the tracker.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class ResourceKind(Enum):
    """The five tradeable commodities, in ledger order."""
    WOOD = "wood"
    BRICK = "brick"
    SHEEP = "sheep"
    WHEAT = "wheat"
    ORE = "ore"

    @property
    def index(self) -> int:
        return RESOURCE_KINDS.index(self)

    @property
    def symbol(self) -> str:
        return DISPLAY_SYMBOLS[self]


RESOURCE_KINDS: tuple[ResourceKind, ...] = tuple(ResourceKind)

DISPLAY_SYMBOLS = {
    ResourceKind.WOOD: "🪵",
    ResourceKind.BRICK: "🧱",
    ResourceKind.SHEEP: "🐑",
    ResourceKind.WHEAT: "🌾",
    ResourceKind.ORE: "⛏️",
}


class StructureKind(Enum):
    """Things a player can pay for."""
    ROAD = "road"
    SETTLEMENT = "settlement"
    CITY = "city"
    DEVELOPMENT_CARD = "development_card"


# Words that name a resource in free log text
DEFAULT_RESOURCE_SYNONYMS: dict[ResourceKind, tuple[str, ...]] = {
    ResourceKind.WOOD: ("lumber", "wood"),
    ResourceKind.BRICK: ("brick", "bricks"),
    ResourceKind.SHEEP: ("wool", "sheep"),
    ResourceKind.WHEAT: ("grain", "wheat"),
    ResourceKind.ORE: ("ore", "ores"),
}

# Icon tokens (after normalisation) and what they depict
ICON_ALIASES: dict[str, "ResourceKind | StructureKind"] = {
    "lumber": ResourceKind.WOOD,
    "wood": ResourceKind.WOOD,
    "brick": ResourceKind.BRICK,
    "wool": ResourceKind.SHEEP,
    "sheep": ResourceKind.SHEEP,
    "grain": ResourceKind.WHEAT,
    "wheat": ResourceKind.WHEAT,
    "ore": ResourceKind.ORE,
    "road": StructureKind.ROAD,
    "settlement": StructureKind.SETTLEMENT,
    "city": StructureKind.CITY,
    "devcardback": StructureKind.DEVELOPMENT_CARD,
    "development_card": StructureKind.DEVELOPMENT_CARD,
}

_ICON_PREFIXES = ("card_", "icon_")


def normalize_icon_token(token: str) -> str:
    """Reduce an icon reference to its bare name.

    >>> normalize_icon_token("/dist/images/card_lumber.svg?v=2")
    'lumber'
    """
    name = token.strip().lower()
    name = name.split("?", 1)[0].rstrip("/")
    name = name.rsplit("/", 1)[-1]
    if "." in name:
        name = name.split(".", 1)[0]
    for prefix in _ICON_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix):]
            break
    return name


def icon_kind(token: str) -> Optional["ResourceKind | StructureKind"]:
    """What an icon token depicts, or None if it depicts nothing we track."""
    return ICON_ALIASES.get(normalize_icon_token(token))


@dataclass(frozen=True)
class ResourceVector:
    """One count per ResourceKind, in RESOURCE_KINDS order."""
    counts: tuple[int, ...] = (0, 0, 0, 0, 0)

    def __post_init__(self):
        if len(self.counts) != len(RESOURCE_KINDS):
            raise ValueError(
                f"ResourceVector needs {len(RESOURCE_KINDS)} counts, got {len(self.counts)}"
            )

    @classmethod
    def zero(cls) -> "ResourceVector":
        return cls()

    @classmethod
    def unit(cls, kind: ResourceKind, amount: int = 1) -> "ResourceVector":
        counts = [0] * len(RESOURCE_KINDS)
        counts[kind.index] = amount
        return cls(tuple(counts))

    @classmethod
    def from_kinds(cls, kinds: Iterable[ResourceKind]) -> "ResourceVector":
        """One unit per occurrence of each kind."""
        counts = [0] * len(RESOURCE_KINDS)
        for kind in kinds:
            counts[kind.index] += 1
        return cls(tuple(counts))

    @classmethod
    def from_dict(cls, amounts: dict) -> "ResourceVector":
        """Build from {kind or kind name: amount}."""
        counts = [0] * len(RESOURCE_KINDS)
        for key, amount in amounts.items():
            kind = key if isinstance(key, ResourceKind) else ResourceKind(str(key).lower())
            counts[kind.index] += int(amount)
        return cls(tuple(counts))

    def __getitem__(self, kind: ResourceKind) -> int:
        return self.counts[kind.index]

    def __iter__(self):
        return iter(self.counts)

    def __add__(self, other: "ResourceVector") -> "ResourceVector":
        return ResourceVector(tuple(a + b for a, b in zip(self.counts, other.counts)))

    def __sub__(self, other: "ResourceVector") -> "ResourceVector":
        return ResourceVector(tuple(a - b for a, b in zip(self.counts, other.counts)))

    def __neg__(self) -> "ResourceVector":
        return ResourceVector(tuple(-a for a in self.counts))

    def is_zero(self) -> bool:
        return not any(self.counts)

    def is_nonnegative(self) -> bool:
        return all(c >= 0 for c in self.counts)

    def total(self) -> int:
        return sum(self.counts)

    def positive_total(self) -> int:
        return sum(c for c in self.counts if c > 0)

    def negative_total(self) -> int:
        return sum(c for c in self.counts if c < 0)

    def to_dict(self) -> dict[str, int]:
        return {kind.value: count for kind, count in zip(RESOURCE_KINDS, self.counts)}

    def describe(self) -> str:
        """Human-readable listing, e.g. '2 wood, 1 ore'."""
        parts = [
            f"{count} {kind.value}"
            for kind, count in zip(RESOURCE_KINDS, self.counts)
            if count
        ]
        return ", ".join(parts) or "nothing"


DEFAULT_BUILD_COSTS: dict[StructureKind, ResourceVector] = {
    StructureKind.ROAD: ResourceVector.from_kinds(
        [ResourceKind.WOOD, ResourceKind.BRICK]
    ),
    StructureKind.SETTLEMENT: ResourceVector.from_kinds(
        [ResourceKind.WOOD, ResourceKind.BRICK, ResourceKind.SHEEP, ResourceKind.WHEAT]
    ),
    StructureKind.CITY: ResourceVector.from_dict(
        {ResourceKind.ORE: 3, ResourceKind.WHEAT: 2}
    ),
    StructureKind.DEVELOPMENT_CARD: ResourceVector.from_kinds(
        [ResourceKind.SHEEP, ResourceKind.WHEAT, ResourceKind.ORE]
    ),
}
