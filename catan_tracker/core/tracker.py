"""
Resource Tracker - runs log records through classification and resolution.

Pipeline per record:
  Register player → Direct operation → Contextual operation → Resolver pass

The tracker is the single owner of the ledger, the outstanding hypotheses
and the audit trail. Nothing here is global; create one tracker per game.
"""

import logging
from collections import Counter
from typing import Callable, Iterable, Optional

from ..ingest.classify import EventClassifier
from ..ingest.models import (
    BankTrade,
    KnownSteal,
    LogRecord,
    Monopoly,
    Operation,
    PlayerTrade,
    ResourceGain,
    ResourceSpend,
    StartingAllocation,
    UnknownSteal,
)
from .aliases import ContextProvider, PlayerAliasResolver, RecentRecordsContext, is_you
from .ledger import LedgerStore
from .narrator import EventNarrator
from .resolver import (
    AmbiguityResolver,
    CandidateDelta,
    HypothesisSummary,
    ReviewOutcome,
    ReviewStatus,
)
from .resources import RESOURCE_KINDS, ResourceKind, StructureKind
from .rules_config import TrackerConfig

logger = logging.getLogger(__name__)


class LedgerContradictionError(RuntimeError):
    """The only surviving hypothesis would leave the ledger negative.

    This means the resolver's own filter is wrong, not that the log was
    ambiguous. Raised only when the tracker runs in strict mode.
    """

    def __init__(self, outcome: ReviewOutcome):
        super().__init__(outcome.message)
        self.outcome = outcome


class ResourceTracker:
    """
    Tracks every player's resources from a stream of game-log records.

    Records must arrive in log order. Each record may be paired with the
    record before it; trades and steals are only recognised when that
    predecessor is supplied.
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        context_provider: Optional[ContextProvider] = None,
        on_update: Optional[Callable[["ResourceTracker"], None]] = None,
    ):
        self.config = config or TrackerConfig()
        self.ledger = LedgerStore()
        self.resolver = AmbiguityResolver()
        self.narrator = EventNarrator(self.config.audit_capacity)
        self.recent_records = RecentRecordsContext()
        self.aliases = PlayerAliasResolver(
            self.narrator,
            context_provider=context_provider or self.recent_records,
            username=self.config.username,
        )
        self.classifier = EventClassifier(
            resource_synonyms=self.config.resource_synonyms,
            build_costs=self.config.build_costs,
        )
        self.on_update = on_update

        self._handlers = {
            StartingAllocation: self._apply_starting,
            ResourceGain: self._apply_gain,
            ResourceSpend: self._apply_spend,
            BankTrade: self._apply_bank_trade,
            Monopoly: self._apply_monopoly,
            PlayerTrade: self._apply_player_trade,
            KnownSteal: self._apply_known_steal,
            UnknownSteal: self._apply_unknown_steal,
        }

    # =========================================================================
    # Input
    # =========================================================================

    def process(self, record: LogRecord, previous: Optional[LogRecord] = None) -> bool:
        """Process one record. Returns True if the ledger or hypotheses changed.

        A failure in one record is logged and recorded in the audit trail;
        it never stops later records. Only a strict-mode contradiction
        propagates.
        """
        try:
            changed = self._process(record, previous)
        except LedgerContradictionError:
            raise
        except Exception as e:
            logger.exception("Error processing record %r", record.text)
            self.narrator.note(f"Error parsing log entry: {e}", debug=True)
            return False

        if changed and self.on_update:
            self.on_update(self)
        return changed

    def process_all(self, records: Iterable[LogRecord]) -> int:
        """Process records in order, each paired with its predecessor.

        Returns the number of records that changed something.
        """
        changed = 0
        previous = None
        for record in records:
            if self.process(record, previous):
                changed += 1
            previous = record
        return changed

    def _process(self, record: LogRecord, previous: Optional[LogRecord]) -> bool:
        self.recent_records.observe(record)
        changed = self._register(record.player)

        operation = self.classifier.classify_direct(record)
        if operation is not None:
            changed = self._apply(operation) or changed

        operation = self.classifier.classify_contextual(record, previous)
        if operation is not None:
            changed = self._apply(operation) or changed

        outcome = self._review()
        return changed or outcome.candidates_before != outcome.candidates_after

    def _register(self, player: Optional[str]) -> bool:
        if not player or is_you(player):
            return False
        if not self.ledger.ensure(player):
            return False
        self.aliases.activate_pending(self.ledger.players)
        return True

    def _apply(self, operation: Operation) -> bool:
        handler = self._handlers[type(operation)]
        return handler(operation)

    def _review(self) -> ReviewOutcome:
        outcome = self.resolver.review(self.ledger)
        if outcome.status == ReviewStatus.COMMITTED:
            self.narrator.note(outcome.message, debug=True)
        elif outcome.status == ReviewStatus.PENDING:
            self.narrator.note(outcome.message, debug=True)
        elif outcome.status == ReviewStatus.INFEASIBLE:
            self.narrator.note(
                f"{outcome.message} ({outcome.candidates_before} hypotheses dropped)",
                debug=True,
            )
            negatives = self.ledger.negative_entries()
            if negatives:
                self.narrator.note(
                    "Negative ledger entries: " + ", ".join(
                        f"{player} {kind.value} {count}" for player, kind, count in negatives
                    ),
                    debug=True,
                )
        elif outcome.status == ReviewStatus.CONTRADICTION:
            self.narrator.note(f"FATAL: {outcome.message}", debug=True)
            if self.config.strict:
                raise LedgerContradictionError(outcome)
        return outcome

    # =========================================================================
    # Operation handlers
    # =========================================================================

    def _resolve_players(self, *names: str) -> Optional[list[str]]:
        """Resolve aliases and require every player to be known already."""
        resolved = [self.aliases.resolve(name, self.ledger.players) for name in names]
        missing = [name for name in resolved if name not in self.ledger]
        if missing:
            logger.warning("Skipping record naming unknown player(s): %s", ", ".join(missing))
            self.narrator.note(
                f"Failed to parse players: {', '.join(missing)} "
                f"(known: {', '.join(self.ledger.players)})",
                debug=True,
            )
            return None
        return resolved

    def _apply_starting(self, op: StartingAllocation) -> bool:
        player = self.aliases.resolve(op.player, self.ledger.players)
        if is_you(player):
            return False
        self._register(player)
        self.ledger.apply_vector(player, op.resources)
        if op.detail_available:
            self.narrator.note(
                f"{player} received starting resources ({op.resources.describe()})"
            )
        else:
            self.narrator.note(f"{player} received starting resources (details not available)")
        return True

    def _apply_gain(self, op: ResourceGain) -> bool:
        players = self._resolve_players(op.player)
        if players is None:
            return False
        player = players[0]
        self.ledger.apply_vector(player, op.resources)
        if op.reason == "year_of_plenty":
            self.narrator.note(f"{player} used Year of Plenty ({op.resources.describe()})")
        else:
            self.narrator.note(f"{player} got {op.resources.describe()}")
        return not op.resources.is_zero()

    def _apply_spend(self, op: ResourceSpend) -> bool:
        players = self._resolve_players(op.player)
        if players is None:
            return False
        player = players[0]
        self.ledger.apply_vector(player, -op.resources)
        if op.reason == StructureKind.DEVELOPMENT_CARD.value:
            self.narrator.note(f"{player} bought a development card")
        elif op.reason == "discard":
            self.narrator.note(f"{player} discarded {op.resources.describe()}")
        else:
            self.narrator.note(f"{player} built a {op.reason}")
        return not op.resources.is_zero()

    def _apply_bank_trade(self, op: BankTrade) -> bool:
        players = self._resolve_players(op.player)
        if players is None:
            return False
        player = players[0]
        self.ledger.apply_vector(player, op.took - op.gave)
        self.narrator.note(
            f"{player} traded with bank: gave {op.gave.describe()}, took {op.took.describe()}"
        )
        return True

    def _apply_monopoly(self, op: Monopoly) -> bool:
        players = self._resolve_players(op.player)
        if players is None:
            return False
        player = players[0]
        if not op.kinds:
            self.narrator.note(f"{player} used Monopoly but no resource was identified", debug=True)
            return False
        for kind in op.kinds:
            seized = 0
            for other in self.ledger.players:
                if other == player:
                    continue
                held = self.ledger.get(other)[kind]
                self.ledger.apply_delta(other, kind, -held)
                seized += held
            self.ledger.apply_delta(player, kind, seized)
            self.narrator.note(f"{player} used Monopoly card (took {seized} {kind.value})")
        return True

    def _apply_player_trade(self, op: PlayerTrade) -> bool:
        players = self._resolve_players(op.initiator, op.counterpart)
        if players is None:
            return False
        initiator, counterpart = players
        self.ledger.apply_vector(initiator, op.received - op.given)
        self.ledger.apply_vector(counterpart, op.given - op.received)
        self.narrator.note(f"{initiator} traded with {counterpart}")
        return True

    def _steal_parties(self, thief: str, victim: str) -> Optional[list[str]]:
        """Resolved (thief, victim), or None when they are unknown or the same player."""
        players = self._resolve_players(thief, victim)
        if players is None:
            return None
        if players[0] == players[1]:
            logger.warning("Skipping steal where %s is both thief and victim", players[0])
            self.narrator.note(
                f"Ignored steal: {players[0]} is both thief and victim", debug=True
            )
            return None
        return players

    def _transfer(self, thief: str, victim: str, kind: ResourceKind) -> None:
        self.ledger.apply_delta(victim, kind, -1)
        self.ledger.apply_delta(thief, kind, 1)

    def _apply_known_steal(self, op: KnownSteal) -> bool:
        players = self._steal_parties(op.thief, op.victim)
        if players is None:
            return False
        thief, victim = players
        self._transfer(thief, victim, op.kind)
        self.narrator.note(f"{thief} stole from {victim} ({op.kind.value})")
        return True

    def _apply_unknown_steal(self, op: UnknownSteal) -> bool:
        players = self._steal_parties(op.thief, op.victim)
        if players is None:
            return False
        thief, victim = players

        if len(self.ledger) == 2 and op.revealed:
            kind = op.revealed[0]
            self._transfer(thief, victim, kind)
            self.narrator.note(
                f"1v1 direct steal: {thief} stole {kind.value} from {victim}", debug=True
            )
            return True

        self.narrator.note(f"Processing unknown steal: {thief} stole from {victim}", debug=True)
        total = self.resolver.add_hint(
            self.ledger.index_of(thief),
            self.ledger.index_of(victim),
            len(self.ledger),
        )
        self.narrator.note(
            f"Added potential deltas for unknown steal. Total deltas: {total}", debug=True
        )
        return True

    # =========================================================================
    # Output
    # =========================================================================

    def ledger_snapshot(self):
        """Read-only mapping of player -> ResourceVector."""
        return self.ledger.snapshot()

    @staticmethod
    def resource_kinds() -> list[dict]:
        return [{"kind": kind.value, "symbol": kind.symbol} for kind in RESOURCE_KINDS]

    def audit_trail(self, include_debug: bool = True) -> list[dict]:
        """Audit entries, most recent last."""
        return [e.to_dict() for e in self.narrator.entries(include_debug)]

    def outstanding_hypotheses(self) -> tuple[CandidateDelta, ...]:
        return self.resolver.candidates

    def player_hypothesis_summary(self, player: str) -> HypothesisSummary:
        index = self.ledger.index_of(player)
        if index is None:
            return HypothesisSummary(Counter({0: 1}), Counter({0: 1}))
        return self.resolver.summary(index)

    def possible_changes(self, player: str, kind: ResourceKind) -> set[int]:
        """Non-zero adjustments the outstanding hypotheses could make to one cell."""
        index = self.ledger.index_of(player)
        if index is None:
            return set()
        return self.resolver.possible_changes(index, kind)

    def set_current_player_alias(self, username: str) -> bool:
        """Pin "you" to a player; deferred until the player appears."""
        return self.aliases.set_current_player(username, self.ledger.players)

    @property
    def current_player(self) -> Optional[str]:
        return self.aliases.current_player

    def reset(self) -> None:
        """Forget all players, hypotheses and audit entries."""
        self.ledger.reset()
        self.resolver.clear()
        self.narrator.clear()
        self.recent_records.clear()


def track_records(
    records: Iterable[LogRecord],
    config: Optional[TrackerConfig] = None,
) -> ResourceTracker:
    """Convenience function: run a whole log through a fresh tracker."""
    tracker = ResourceTracker(config)
    tracker.process_all(records)
    return tracker
