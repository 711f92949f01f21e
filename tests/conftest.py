# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# FIXTURES:
# ---------
# - store        InMemoryEntityStore seeded with one customer,
#                three products and two collections
# - alerts       list collecting notifier messages
# - notifier     callable appending to alerts
# - fixed_clock  deterministic clock for note timestamps
# ==============================================

from datetime import datetime, timedelta, timezone

import pytest

from admin_widgets.config import reset_config
from admin_widgets.remote.entity import COLLECTIONS, CUSTOMERS, PRODUCTS
from admin_widgets.remote.memory_store import InMemoryEntityStore

CUSTOMER_ID = "cus_01"
PRODUCT_ID = "prod_01"


@pytest.fixture
def store():
    store = InMemoryEntityStore()
    store.add(CUSTOMERS, CUSTOMER_ID, metadata={"a": 1}, email="jane@example.com")
    store.add(PRODUCTS, PRODUCT_ID, metadata={}, title="Trail Shoe", handle="trail-shoe")
    store.add(PRODUCTS, "prod_02", title="Rain Jacket", handle="rain-jacket")
    store.add(PRODUCTS, "prod_03", title="Trail Sock", handle="trail-sock")
    store.add(COLLECTIONS, "pcol_01", title="Summer", handle="summer")
    store.add(COLLECTIONS, "pcol_02", title="Winter", handle="winter")
    return store


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def notifier(alerts):
    return alerts.append


@pytest.fixture
def fixed_clock():
    """Clock starting at 2024-05-01T12:00:00Z, advancing one second per call."""
    state = {"now": datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)}

    def clock():
        current = state["now"]
        state["now"] = current + timedelta(seconds=1)
        return current

    return clock


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()
