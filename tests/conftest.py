"""
Shared pytest fixtures for all tests.
"""

import pytest
from pathlib import Path

# Add the project root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from catan_tracker.core.ledger import LedgerStore
from catan_tracker.core.narrator import EventNarrator
from catan_tracker.core.resolver import AmbiguityResolver
from catan_tracker.core.rules_config import TrackerConfig
from catan_tracker.core.tracker import ResourceTracker
from catan_tracker.ingest.classify import EventClassifier
from tests.fixtures.records import feed, starting


# =============================================================================
# Component Fixtures
# =============================================================================

@pytest.fixture
def ledger():
    """Empty ledger."""
    return LedgerStore()


@pytest.fixture
def narrator():
    return EventNarrator()


@pytest.fixture
def resolver():
    """Resolver with no outstanding hypotheses."""
    return AmbiguityResolver()


@pytest.fixture
def classifier():
    """Classifier with the standard synonyms and costs."""
    return EventClassifier()


# =============================================================================
# Tracker Fixtures
# =============================================================================

@pytest.fixture
def tracker():
    """Fresh tracker with default configuration."""
    return ResourceTracker(TrackerConfig())


@pytest.fixture
def strict_tracker():
    return ResourceTracker(TrackerConfig(strict=True))


@pytest.fixture
def two_player_tracker(tracker):
    """
    Alice and Bob with starting resources.

    Alice: wood, brick
    Bob:   sheep, ore
    """
    feed(
        tracker,
        starting("Alice", "card_lumber", "card_brick"),
        starting("Bob", "card_wool", "card_ore"),
    )
    return tracker


@pytest.fixture
def three_player_tracker(tracker):
    """
    Alice, Bob and Carol with starting resources.

    Alice: wood, brick
    Bob:   sheep, ore
    Carol: wheat
    """
    feed(
        tracker,
        starting("Alice", "card_lumber", "card_brick"),
        starting("Bob", "card_wool", "card_ore"),
        starting("Carol", "card_grain"),
    )
    return tracker
