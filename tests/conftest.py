"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from krypto.catalog import Catalog  # noqa: E402
from krypto.engine import ReviewEngine  # noqa: E402
from krypto.srs.models import ItemType, ReviewItem  # noqa: E402
from krypto.store.memory import InMemoryItemStore  # noqa: E402

# 2024-01-01T00:00:00Z
NOW = 1_704_067_200_000


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time (epoch ms)."""
    return NOW


@pytest.fixture
def rng():
    """Seeded random source for reproducible shuffles."""
    return random.Random(42)


@pytest.fixture
def store():
    """Empty in-memory item store."""
    return InMemoryItemStore()


@pytest.fixture
def small_catalog():
    """A tiny universe: three letters, two noun endings, one verb ending."""
    return Catalog(
        {
            ItemType.LETTER: ["letter-alpha", "letter-beta", "letter-gamma"],
            ItemType.NOUN_ENDING: ["noun-2d-masc-nom-s", "noun-2d-masc-gen-s"],
            ItemType.VERB_ENDING: ["verb-pres-act-ind-1s"],
        }
    )


@pytest.fixture
def engine(store, small_catalog, rng, now):
    """Initialized engine over the small catalogue."""
    engine = ReviewEngine(store, catalog=small_catalog, rng=rng)
    engine.initialize(now)
    return engine


@pytest.fixture
def sample_item(now):
    """A letter item in its default state."""
    return ReviewItem.new("letter-alpha", ItemType.LETTER, now)
