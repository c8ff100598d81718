"""
Player alias resolution.

The game log refers to the watching player as "You". The tracker needs a
real player name for ledger rows, so "you" is resolved once per session and
remembered.

Resolution order:
  1. Cached identity (set explicitly or by an earlier resolution)
  2. Context provider (external collaborator that inspects the host UI/log)
  3. The only known player
  4. The first known player
"""

import logging
from collections import deque
from typing import Callable, Optional, Sequence

from .narrator import EventNarrator

logger = logging.getLogger(__name__)

# Given the known players, name the one who is "you" (or None if unsure)
ContextProvider = Callable[[Sequence[str]], Optional[str]]

# Phrases only the watching player's own log lines contain
SELF_REFERENCE_PHRASES = (
    "You rolled",
    "Your turn",
    "You built",
    "You bought",
    "You traded",
    "You stole",
)


def is_you(token: Optional[str]) -> bool:
    return bool(token) and token.strip().lower() == "you"


class RecentRecordsContext:
    """Infers "you" from recent log records that name their own author.

    A record like "You rolled" that also carries a highlighted player
    name identifies that name as the watching player.
    """

    def __init__(self, limit: int = 200):
        self._records = deque(maxlen=limit)

    def observe(self, record) -> None:
        self._records.append(record)

    def clear(self) -> None:
        self._records.clear()

    def __call__(self, known_players: Sequence[str]) -> Optional[str]:
        for record in self._records:
            if not record.player or record.player not in known_players:
                continue
            if any(phrase in record.text for phrase in SELF_REFERENCE_PHRASES):
                return record.player
        return None


class PlayerAliasResolver:
    """Remembers who "you" is."""

    def __init__(
        self,
        narrator: EventNarrator,
        context_provider: Optional[ContextProvider] = None,
        username: Optional[str] = None,
    ):
        self.narrator = narrator
        self.context_provider = context_provider
        self.current_player: Optional[str] = None
        self.pending_username: Optional[str] = username

    def resolve(self, name: str, known_players: Sequence[str]) -> str:
        """Map a player token to a player name; non-"you" tokens pass through."""
        if not is_you(name):
            return name

        if self.current_player and self.current_player in known_players:
            self.narrator.note(
                f"Resolved 'You' to stored username '{self.current_player}'", debug=True
            )
            return self.current_player

        if self.context_provider is not None:
            inferred = self.context_provider(known_players)
            if inferred and inferred in known_players:
                self.current_player = inferred
                logger.info("Resolved 'You' to %s from context", inferred)
                self.narrator.note(f"Resolved 'You' to '{inferred}' from context", debug=True)
                return inferred

        if len(known_players) == 1:
            self.current_player = known_players[0]
            logger.info("Resolved 'You' to %s (only player)", self.current_player)
            self.narrator.note(
                f"Resolved 'You' to '{self.current_player}' (only player)", debug=True
            )
            return self.current_player

        if known_players:
            self.current_player = known_players[0]
            logger.warning("Resolved 'You' to %s by fallback", self.current_player)
            self.narrator.note(
                f"Resolved 'You' to '{self.current_player}' (fallback)", debug=True
            )
            return self.current_player

        logger.warning("Cannot resolve 'You': no players known yet")
        self.narrator.note("Cannot resolve 'You': no players known yet", debug=True)
        return name

    def set_current_player(self, username: str, known_players: Sequence[str]) -> bool:
        """Pin "you" to a username. Deferred until that player appears.

        Returns True if it took effect immediately.
        """
        if username in known_players:
            self.current_player = username
            self.pending_username = None
            self.narrator.note(f"Set current player to '{username}'", debug=True)
            return True
        self.pending_username = username
        self.narrator.note(
            f"Will set current player to '{username}' as soon as they appear in the game log",
            debug=True,
        )
        return False

    def activate_pending(self, known_players: Sequence[str]) -> bool:
        """Promote the pending username once it is a known player."""
        if self.pending_username and self.pending_username in known_players:
            self.current_player = self.pending_username
            self.narrator.note(
                f"Activated pending username '{self.pending_username}' as current player",
                debug=True,
            )
            self.pending_username = None
            return True
        return False
