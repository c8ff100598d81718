"""
Ambiguity Resolver - tracks what unknown steals could have taken.

Every unknown steal contributes five possibilities (one per resource kind).
The resolver keeps the cross product of all outstanding possibilities as
CandidateDelta matrices, drops the ones the current ledger rules out, and
commits the last one standing.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from .ledger import LedgerStore
from .resources import RESOURCE_KINDS, ResourceKind, ResourceVector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateDelta:
    """
    One hypothesis about the unresolved steals, as a signed adjustment
    to the ledger with one row per player index.

    Rows beyond the end of the tuple (players who joined after the
    hypothesis was built) count as zero.
    """
    rows: tuple[ResourceVector, ...] = ()

    @classmethod
    def identity(cls, player_count: int) -> "CandidateDelta":
        return cls(tuple(ResourceVector.zero() for _ in range(player_count)))

    @classmethod
    def transfer(
        cls,
        player_count: int,
        to_index: int,
        from_index: int,
        kind: ResourceKind,
        amount: int = 1,
    ) -> "CandidateDelta":
        """A single transfer of `amount` of `kind` between two players."""
        rows = [ResourceVector.zero() for _ in range(player_count)]
        rows[to_index] = rows[to_index] + ResourceVector.unit(kind, amount)
        rows[from_index] = rows[from_index] - ResourceVector.unit(kind, amount)
        return cls(tuple(rows))

    def row(self, index: int) -> ResourceVector:
        if index < len(self.rows):
            return self.rows[index]
        return ResourceVector.zero()

    def __add__(self, other: "CandidateDelta") -> "CandidateDelta":
        size = max(len(self.rows), len(other.rows))
        return CandidateDelta(tuple(self.row(i) + other.row(i) for i in range(size)))

    def is_identity(self) -> bool:
        return all(r.is_zero() for r in self.rows)

    def apply_to(self, holdings: Sequence[ResourceVector]) -> tuple[ResourceVector, ...]:
        """Holdings after this hypothesis is applied."""
        return tuple(vec + self.row(i) for i, vec in enumerate(holdings))

    def to_lists(self) -> list[list[int]]:
        return [list(r.counts) for r in self.rows]


class ReviewStatus(Enum):
    """What a resolver pass concluded."""
    IDLE = "idle"                    # nothing outstanding
    PENDING = "pending"              # several hypotheses remain
    COMMITTED = "committed"          # collapsed to one and applied
    INFEASIBLE = "infeasible"        # every hypothesis ruled out
    CONTRADICTION = "contradiction"  # the surviving hypothesis broke the ledger


@dataclass
class ReviewOutcome:
    """Result of one resolver pass."""
    status: ReviewStatus
    candidates_before: int = 0
    candidates_after: int = 0
    committed: Optional[CandidateDelta] = None
    message: str = ""

    @property
    def is_fatal(self) -> bool:
        return self.status == ReviewStatus.CONTRADICTION

    @property
    def changed_ledger(self) -> bool:
        return self.status == ReviewStatus.COMMITTED


@dataclass
class HypothesisSummary:
    """Possible net gains and losses of one player across outstanding hypotheses."""
    gained: Counter = field(default_factory=Counter)
    lost: Counter = field(default_factory=Counter)


class AmbiguityResolver:
    """
    Owns the outstanding CandidateSet.

    The set is empty when nothing is ambiguous. It only grows through
    add_hint() and only shrinks through review().
    """

    def __init__(self):
        self._candidates: tuple[CandidateDelta, ...] = ()

    @property
    def candidates(self) -> tuple[CandidateDelta, ...]:
        return self._candidates

    def has_hypotheses(self) -> bool:
        return bool(self._candidates)

    def add_hint(self, thief_index: int, victim_index: int, player_count: int) -> int:
        """Fold an unknown one-card steal into the candidate set.

        Orderings that end in the same matrix are kept once, in first-seen
        order. Returns the new number of candidates.
        """
        per_kind = [
            CandidateDelta.transfer(player_count, thief_index, victim_index, kind)
            for kind in RESOURCE_KINDS
        ]
        base = self._candidates or (CandidateDelta.identity(player_count),)
        # distinct matrices only, first-seen order
        self._candidates = tuple(dict.fromkeys(
            existing + option
            for existing in base
            for option in per_kind
        ))
        logger.debug(
            "Unknown steal %d -> %d: %d candidates outstanding",
            victim_index, thief_index, len(self._candidates),
        )
        return len(self._candidates)

    def filter_feasible(self, holdings: Sequence[ResourceVector]) -> tuple[CandidateDelta, ...]:
        """Candidates that keep every ledger entry non-negative and move something."""
        return tuple(c for c in self._candidates if self._is_feasible(c, holdings))

    def _is_feasible(self, candidate: CandidateDelta, holdings: Sequence[ResourceVector]) -> bool:
        if candidate.is_identity():
            return False
        return all(vec.is_nonnegative() for vec in candidate.apply_to(holdings))

    def review(self, ledger: LedgerStore) -> ReviewOutcome:
        """Filter against the ledger and commit if exactly one candidate is left."""
        before = len(self._candidates)
        if not before:
            return ReviewOutcome(ReviewStatus.IDLE)

        holdings = ledger.rows()
        self._candidates = self.filter_feasible(holdings)
        after = len(self._candidates)

        if after == 0:
            logger.error(
                "No hypothesis survives against the ledger (%d dropped); "
                "an earlier record was probably misclassified", before,
            )
            return ReviewOutcome(
                ReviewStatus.INFEASIBLE,
                candidates_before=before,
                message="Couldn't resolve thefts - potential parsing bug",
            )

        if after == 1:
            delta = self._candidates[0]
            self._candidates = ()
            resolved = delta.apply_to(holdings)
            if not all(vec.is_nonnegative() for vec in resolved):
                logger.critical(
                    "Committed hypothesis leaves a negative ledger: %s", delta.to_lists()
                )
                return ReviewOutcome(
                    ReviewStatus.CONTRADICTION,
                    candidates_before=before,
                    committed=delta,
                    message="Couldn't resolve thefts correctly",
                )
            ledger.replace_rows(resolved)
            logger.info("Resolved ambiguous steals from %d candidates", before)
            return ReviewOutcome(
                ReviewStatus.COMMITTED,
                candidates_before=before,
                committed=delta,
                message="Resolved ambiguous theft - applied delta",
            )

        return ReviewOutcome(
            ReviewStatus.PENDING,
            candidates_before=before,
            candidates_after=after,
            message=f"{after} potential theft deltas remaining",
        )

    def summary(self, player_index: int) -> HypothesisSummary:
        """Multisets of net gains (>= 0) and net losses (<= 0) for one player."""
        if not self._candidates:
            return HypothesisSummary(Counter({0: 1}), Counter({0: 1}))
        gained = Counter(c.row(player_index).positive_total() for c in self._candidates)
        lost = Counter(c.row(player_index).negative_total() for c in self._candidates)
        return HypothesisSummary(gained, lost)

    def possible_changes(self, player_index: int, kind: ResourceKind) -> set[int]:
        """Distinct non-zero adjustments to one ledger cell across hypotheses."""
        return {
            c.row(player_index)[kind]
            for c in self._candidates
            if c.row(player_index)[kind] != 0
        }

    def clear(self) -> None:
        self._candidates = ()
