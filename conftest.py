from datetime import datetime, timezone

import pytest

from inventory_search.backend.seed_data import gen_inventory
from inventory_search.config import set_config_for_test
from inventory_search.data.backends.memory_backend import MemoryInventoryStore

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from default settings."""
    set_config_for_test()
    yield
    set_config_for_test()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def seeded_items(fixed_now):
    """The 60-record dataset spread over 9 branches."""
    return gen_inventory(60, seed=1234, now=fixed_now)


@pytest.fixture
def store(seeded_items):
    return MemoryInventoryStore(seeded_items)
