"""Log Record Classification.

Turns one game-log record into at most one typed Operation. Classification
is pure; the tracker applies the result.

Matchers run in two phases:
  1. Direct: records that fully describe a ledger change on their own
  2. Contextual: trades and steals, only considered when the record's
     predecessor is known

Within a phase the first matcher whose predicate accepts the record claims
it, even if its extractor then finds nothing actionable.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from ..core.aliases import is_you
from ..core.resources import (
    DEFAULT_BUILD_COSTS,
    DEFAULT_RESOURCE_SYNONYMS,
    ResourceKind,
    ResourceVector,
    StructureKind,
)
from .models import (
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

logger = logging.getLogger(__name__)

# Message snippets
STARTING_RESOURCES = "received starting resources"
GOT_PATTERN = re.compile(r"\bgot\b")
BUILT = "built a"
BOUGHT = " bought "
YEAR_OF_PLENTY = "took from bank"
BANK_GAVE = "gave bank"
BANK_TOOK = "and took"
DISCARDED = "discarded"
TRADED = " traded:"
TRADE_FOR = "for:"
TRADE_WITH = " with:"
STOLE_PATTERN = re.compile(r"\bstole\b")
DEVELOPMENT_CARD_TEXT = "development card"

_PUNCTUATION = re.compile(r"[^\w\s]")
_TOKEN_STRIP = ":;,.!?()[]\"'"


@dataclass(frozen=True)
class Matcher:
    """A named predicate-plus-extractor pair."""
    name: str
    matches: Callable[[LogRecord], bool]
    extract: Callable[[LogRecord], Optional[Operation]]


def _words(text: str) -> list[str]:
    return text.split()


def _clean_token(word: str) -> str:
    return word.strip(_TOKEN_STRIP)


def _actor(text: str) -> Optional[str]:
    words = _words(text)
    return _clean_token(words[0]) if words else None


def is_monopoly(text: str) -> bool:
    """True for '<player> stole <integer> ...' once punctuation is removed."""
    words = _words(_PUNCTUATION.sub("", text))
    return len(words) >= 3 and words[1] == "stole" and words[2].isdigit()


class EventClassifier:
    """Classifies game-log records into ledger operations."""

    def __init__(
        self,
        resource_synonyms: Optional[dict[ResourceKind, Iterable[str]]] = None,
        build_costs: Optional[dict[StructureKind, ResourceVector]] = None,
    ):
        synonyms = resource_synonyms or DEFAULT_RESOURCE_SYNONYMS
        self._word_kinds: dict[str, ResourceKind] = {}
        for kind, words in synonyms.items():
            for word in words:
                self._word_kinds[word.lower()] = kind
        self.build_costs = dict(build_costs or DEFAULT_BUILD_COSTS)

        self.direct_matchers = [
            Matcher("starting_allocation", self._is_starting, self._starting),
            Matcher("dice_gain", self._is_got, self._got),
            Matcher("construction", self._is_built, self._built),
            Matcher("development_card", self._is_bought, self._bought),
            Matcher("year_of_plenty", self._is_year_of_plenty, self._year_of_plenty),
            Matcher("bank_trade", self._is_bank_trade, self._bank_trade),
            Matcher("monopoly", self._is_monopoly, self._monopoly),
            Matcher("discard", self._is_discard, self._discard),
        ]
        self.contextual_matchers = [
            Matcher("player_trade", self._is_player_trade, self._player_trade),
            Matcher("known_steal", self._is_known_steal, self._known_steal),
            Matcher("unknown_steal", self._is_steal, self._unknown_steal),
        ]

    # =========================================================================
    # Entry points
    # =========================================================================

    def classify(
        self,
        record: LogRecord,
        previous: Optional[LogRecord] = None,
    ) -> Optional[Operation]:
        """First operation the record yields, direct phase first."""
        operation = self.classify_direct(record)
        if operation is None:
            operation = self.classify_contextual(record, previous)
        return operation

    def classify_direct(self, record: LogRecord) -> Optional[Operation]:
        return self._run(self.direct_matchers, record)

    def classify_contextual(
        self,
        record: LogRecord,
        previous: Optional[LogRecord],
    ) -> Optional[Operation]:
        if previous is None:
            return None
        return self._run(self.contextual_matchers, record)

    def _run(self, matchers: list[Matcher], record: LogRecord) -> Optional[Operation]:
        for matcher in matchers:
            if matcher.matches(record):
                operation = matcher.extract(record)
                logger.debug("Record matched %s -> %r", matcher.name, operation)
                return operation
        return None

    # =========================================================================
    # Resource identity
    # =========================================================================

    def keyword_kinds(self, words: Iterable[str]) -> list[ResourceKind]:
        """Resource kinds named by free-text words, one per matching word."""
        found = []
        for word in words:
            kind = self._word_kinds.get(_clean_token(word).lower())
            if kind is not None:
                found.append(kind)
        return found

    def _resources(self, record: LogRecord, fallback_words: Iterable[str]) -> list[ResourceKind]:
        """Icons when the record has any, otherwise keywords in the fallback words."""
        kinds = record.resource_icons()
        if kinds:
            return kinds
        return self.keyword_kinds(fallback_words)

    def _structures(self, record: LogRecord, fallback_words: Iterable[str]) -> list[StructureKind]:
        structures = [i.structure for i in record.icons if i.structure is not None]
        if structures:
            return structures
        found = []
        for word in fallback_words:
            try:
                found.append(StructureKind(_clean_token(word).lower()))
            except ValueError:
                continue
        return found

    # =========================================================================
    # Direct matchers
    # =========================================================================

    def _is_starting(self, record: LogRecord) -> bool:
        return STARTING_RESOURCES in record.text

    def _starting(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        player = _actor(text.replace(STARTING_RESOURCES, ""))
        if not player:
            return None
        tail = text.split(STARTING_RESOURCES, 1)[1]
        kinds = self._resources(record, _words(tail))
        return StartingAllocation(
            player=player,
            resources=ResourceVector.from_kinds(kinds),
            detail_available=bool(kinds),
        )

    def _is_got(self, record: LogRecord) -> bool:
        return bool(GOT_PATTERN.search(record.text))

    def _got(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        player = _actor(text)
        if not player:
            return None
        kinds = self._resources(record, _words(text)[2:])
        return ResourceGain(player, ResourceVector.from_kinds(kinds), reason="roll")

    def _is_built(self, record: LogRecord) -> bool:
        return BUILT in record.text

    def _built(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        player = _actor(text)
        structures = self._structures(record, text.split(BUILT, 1)[1].split())
        structures = [s for s in structures if s != StructureKind.DEVELOPMENT_CARD]
        if not player or not structures:
            return None
        cost = ResourceVector.zero()
        for structure in structures:
            cost = cost + self.build_costs[structure]
        return ResourceSpend(player, cost, reason=structures[0].value)

    def _is_bought(self, record: LogRecord) -> bool:
        return BOUGHT in record.text

    def _bought(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        player = _actor(text)
        cards = [
            i for i in record.icons
            if i.structure == StructureKind.DEVELOPMENT_CARD
        ]
        count = len(cards)
        if not count and DEVELOPMENT_CARD_TEXT in text.lower():
            count = 1
        if not player or not count:
            return None
        cost = ResourceVector.zero()
        for _ in range(count):
            cost = cost + self.build_costs[StructureKind.DEVELOPMENT_CARD]
        return ResourceSpend(player, cost, reason=StructureKind.DEVELOPMENT_CARD.value)

    def _is_year_of_plenty(self, record: LogRecord) -> bool:
        return YEAR_OF_PLENTY in record.text

    def _year_of_plenty(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        player = _actor(text)
        if not player:
            return None
        kinds = self._resources(record, text.split(YEAR_OF_PLENTY, 1)[1].split())
        return ResourceGain(player, ResourceVector.from_kinds(kinds), reason="year_of_plenty")

    def _is_bank_trade(self, record: LogRecord) -> bool:
        text = record.text
        return BANK_GAVE in text and BANK_TOOK in text

    def _bank_trade(self, record: LogRecord) -> Optional[Operation]:
        player = _actor(record.text)
        if not player:
            return None
        gave = [i.resource for i in record.icons_between(BANK_GAVE, BANK_TOOK) if i.resource]
        took = [i.resource for i in record.icons_between(BANK_TOOK) if i.resource]
        return BankTrade(
            player,
            gave=ResourceVector.from_kinds(gave),
            took=ResourceVector.from_kinds(took),
        )

    def _is_monopoly(self, record: LogRecord) -> bool:
        return is_monopoly(record.text)

    def _monopoly(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        player = _actor(text)
        if not player:
            return None
        kinds = self._resources(record, _words(text)[3:])
        # one entry per kind, in first-seen order
        unique = tuple(dict.fromkeys(kinds))
        return Monopoly(player, unique)

    def _is_discard(self, record: LogRecord) -> bool:
        return DISCARDED in record.text

    def _discard(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        player = _actor(text)
        if not player:
            return None
        kinds = self._resources(record, text.split(DISCARDED, 1)[1].split())
        return ResourceSpend(player, ResourceVector.from_kinds(kinds), reason="discard")

    # =========================================================================
    # Contextual matchers
    # =========================================================================

    def _is_player_trade(self, record: LogRecord) -> bool:
        text = record.text
        return TRADED in text and TRADE_WITH in text and TRADE_FOR in text

    def _player_trade(self, record: LogRecord) -> Optional[Operation]:
        text = record.text
        initiator = _actor(text.split(TRADED, 1)[0])
        counterpart = _actor(text.split(TRADE_WITH, 1)[1])
        if not initiator or not counterpart:
            return None
        given = [i.resource for i in record.icons_between(TRADED, TRADE_FOR) if i.resource]
        received = [i.resource for i in record.icons_between(TRADE_FOR, TRADE_WITH) if i.resource]
        return PlayerTrade(
            initiator,
            counterpart,
            given=ResourceVector.from_kinds(given),
            received=ResourceVector.from_kinds(received),
        )

    def _steal_parties(self, record: LogRecord) -> Optional[tuple[str, str, list[str]]]:
        """(thief, victim, words between them) for a two-party steal line."""
        words = _words(record.text)
        if len(words) < 3:
            return None
        thief = _clean_token(words[0])
        victim = _clean_token(words[-1])
        if not thief or not victim or thief == victim:
            return None
        return thief, victim, words[1:-1]

    def _is_steal(self, record: LogRecord) -> bool:
        text = record.text
        return bool(STOLE_PATTERN.search(text)) and not is_monopoly(text)

    def _is_known_steal(self, record: LogRecord) -> bool:
        if not self._is_steal(record):
            return False
        parties = self._steal_parties(record)
        if parties is None:
            return False
        thief, victim, middle = parties
        if not (is_you(thief) or is_you(victim)):
            return False
        return bool(self._resources(record, middle))

    def _known_steal(self, record: LogRecord) -> Optional[Operation]:
        thief, victim, middle = self._steal_parties(record)
        kinds = self._resources(record, middle)
        return KnownSteal(thief, victim, kinds[0])

    def _unknown_steal(self, record: LogRecord) -> Optional[Operation]:
        parties = self._steal_parties(record)
        if parties is None:
            return None
        thief, victim, middle = parties
        revealed = tuple(self._resources(record, middle))
        return UnknownSteal(thief, victim, revealed)
