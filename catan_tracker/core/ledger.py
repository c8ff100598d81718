"""
Ledger Store - per-player resource holdings.

Players keep their first-seen order, which is also the row index used by
hypothesis matrices in the resolver.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from .resources import RESOURCE_KINDS, ResourceKind, ResourceVector

logger = logging.getLogger(__name__)


class LedgerStore:
    """
    In-memory mapping of player -> ResourceVector.

    Mutations are not checked for non-negativity here. Direct operations
    trust the classifier; the resolver decides what to do with negative
    entries.
    """

    def __init__(self):
        self._holdings: dict[str, ResourceVector] = {}

    def __contains__(self, player: str) -> bool:
        return player in self._holdings

    def __len__(self) -> int:
        return len(self._holdings)

    @property
    def players(self) -> list[str]:
        """Known players in first-seen order."""
        return list(self._holdings)

    def index_of(self, player: str) -> Optional[int]:
        """Stable row index of a player, or None if unknown."""
        for i, name in enumerate(self._holdings):
            if name == player:
                return i
        return None

    def get(self, player: str) -> ResourceVector:
        """Holdings of a player; the zero vector if the player is unknown."""
        return self._holdings.get(player, ResourceVector.zero())

    def ensure(self, player: str) -> bool:
        """Create a zero entry for a new player. Returns True if created."""
        if player in self._holdings:
            return False
        self._holdings[player] = ResourceVector.zero()
        logger.info("Added player %s (%d known)", player, len(self._holdings))
        return True

    def apply_delta(self, player: str, kind: ResourceKind, amount: int) -> ResourceVector:
        """Add a signed amount of one resource to a player."""
        return self.apply_vector(player, ResourceVector.unit(kind, amount))

    def apply_vector(self, player: str, vector: ResourceVector) -> ResourceVector:
        """Add a signed vector to a player's holdings."""
        if player not in self._holdings:
            raise KeyError(f"Unknown player: {player}")
        updated = self._holdings[player] + vector
        self._holdings[player] = updated
        if not updated.is_nonnegative():
            logger.warning("Ledger for %s went negative: %s", player, updated.to_dict())
        return updated

    def rows(self) -> tuple[ResourceVector, ...]:
        """All holdings in player index order."""
        return tuple(self._holdings.values())

    def replace_rows(self, rows: Sequence[ResourceVector]) -> None:
        """Overwrite every player's holdings, in player index order."""
        if len(rows) != len(self._holdings):
            raise ValueError(
                f"Expected {len(self._holdings)} rows, got {len(rows)}"
            )
        for player, row in zip(list(self._holdings), rows):
            self._holdings[player] = row

    def snapshot(self) -> Mapping[str, ResourceVector]:
        """Read-only view of the current ledger state."""
        return MappingProxyType(dict(self._holdings))

    def negative_entries(self) -> list[tuple[str, ResourceKind, int]]:
        """Every (player, kind, count) whose count is below zero."""
        found = []
        for player, vector in self._holdings.items():
            for kind in RESOURCE_KINDS:
                if vector[kind] < 0:
                    found.append((player, kind, vector[kind]))
        return found

    def reset(self) -> None:
        """Forget every player."""
        self._holdings.clear()
        logger.info("Ledger reset")
