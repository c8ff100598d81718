"""Test fixtures for catan-card-tracker tests."""

from .records import (
    bank_trade,
    bought_card,
    built,
    discarded,
    feed,
    filler,
    got,
    icons,
    monopoly,
    starting,
    stole,
    traded,
    unseen_steal,
    year_of_plenty,
)

__all__ = [
    "bank_trade",
    "bought_card",
    "built",
    "discarded",
    "feed",
    "filler",
    "got",
    "icons",
    "monopoly",
    "starting",
    "stole",
    "traded",
    "unseen_steal",
    "year_of_plenty",
]
