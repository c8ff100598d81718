"""Data models for log records and the operations classified from them.

A LogRecord is one game-log line: text fragments interleaved with icons,
plus the highlighted player name when the line has one. Operations are the
tagged results of classification; the tracker applies them.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from ..core.resources import (
    ResourceKind,
    ResourceVector,
    StructureKind,
    icon_kind,
)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Icon:
    """An inline image in a log line, identified by its token (alt text or src)."""
    token: str

    @property
    def kind(self) -> Optional[Union[ResourceKind, StructureKind]]:
        return icon_kind(self.token)

    @property
    def resource(self) -> Optional[ResourceKind]:
        kind = self.kind
        return kind if isinstance(kind, ResourceKind) else None

    @property
    def structure(self) -> Optional[StructureKind]:
        kind = self.kind
        return kind if isinstance(kind, StructureKind) else None


Part = Union[str, Icon]


@dataclass(frozen=True)
class LogRecord:
    """One game-log entry."""
    parts: tuple[Part, ...] = ()
    player: Optional[str] = None

    @classmethod
    def of(cls, *parts: Part, player: Optional[str] = None) -> "LogRecord":
        return cls(tuple(parts), player)

    @property
    def text(self) -> str:
        """Text content with icons removed."""
        return "".join(p for p in self.parts if isinstance(p, str))

    @property
    def icons(self) -> list[Icon]:
        return [p for p in self.parts if isinstance(p, Icon)]

    def _positioned_icons(self) -> list[tuple[int, Icon]]:
        """Icons paired with their offset into `text`."""
        offset = 0
        found = []
        for part in self.parts:
            if isinstance(part, Icon):
                found.append((offset, part))
            else:
                offset += len(part)
        return found

    def icons_between(self, start: Optional[str] = None, end: Optional[str] = None) -> list[Icon]:
        """Icons after the first `start` marker and before the first `end` marker.

        A missing marker leaves that side of the range open.
        """
        text = self.text
        lo = 0
        hi = len(text)
        if start is not None:
            idx = text.find(start)
            if idx == -1:
                return []
            lo = idx + len(start)
        if end is not None:
            idx = text.find(end, lo)
            if idx != -1:
                hi = idx
        return [icon for pos, icon in self._positioned_icons() if lo <= pos <= hi]

    def resource_icons(self) -> list[ResourceKind]:
        return [i.resource for i in self.icons if i.resource is not None]


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StartingAllocation:
    """Resources handed out for the second starting settlement."""
    player: str
    resources: ResourceVector
    detail_available: bool = True


@dataclass(frozen=True)
class ResourceGain:
    """Resources received from the bank (dice roll or Year of Plenty)."""
    player: str
    resources: ResourceVector
    reason: str = "roll"


@dataclass(frozen=True)
class ResourceSpend:
    """Resources paid to the bank (building, buying, discarding)."""
    player: str
    resources: ResourceVector
    reason: str


@dataclass(frozen=True)
class BankTrade:
    player: str
    gave: ResourceVector
    took: ResourceVector


@dataclass(frozen=True)
class Monopoly:
    """Every other player hands over all of each named kind."""
    player: str
    kinds: tuple[ResourceKind, ...]


@dataclass(frozen=True)
class PlayerTrade:
    initiator: str
    counterpart: str
    given: ResourceVector
    received: ResourceVector


@dataclass(frozen=True)
class KnownSteal:
    thief: str
    victim: str
    kind: ResourceKind


@dataclass(frozen=True)
class UnknownSteal:
    """A one-card steal whose resource the log did not show."""
    thief: str
    victim: str
    revealed: tuple[ResourceKind, ...] = field(default_factory=tuple)


Operation = Union[
    StartingAllocation,
    ResourceGain,
    ResourceSpend,
    BankTrade,
    Monopoly,
    PlayerTrade,
    KnownSteal,
    UnknownSteal,
]
