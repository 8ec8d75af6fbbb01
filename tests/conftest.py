# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- fakeredis-backed ValkeyCache
- A small storefront loaded into the in-memory repositories
- A FunnelReportService wired to those repositories
"""

import fakeredis
import pytest

from factories import cart, order, view
from funnelcore.core.models import EntityKind, EntityMetadata, MarketingTags
from funnelcore.infrastructure.cache import ValkeyCache
from funnelcore.infrastructure.repositories import (
    InMemoryCatalogRepository,
    InMemoryEventRepository,
    InMemoryTransactionRepository,
)
from funnelcore.services import FunnelReportService
from funnelcore.utils.config import ReportSettings


# ==============================================================================
# Cache Fixtures
# ==============================================================================


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real ValkeyCache behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def fake_cache(fake_redis):
    """A ValkeyCache backed by fakeredis."""
    return ValkeyCache(url="redis://fake:6379", client=fake_redis)


# ==============================================================================
# Storefront Fixtures
# ==============================================================================


@pytest.fixture()
def catalog():
    return InMemoryCatalogRepository(
        [
            EntityMetadata(entity_id="mug", name="Mug", kind=EntityKind.PRODUCT, category="Kitchen"),
            EntityMetadata(entity_id="tee", name="T-Shirt", kind=EntityKind.PRODUCT),
            EntityMetadata(
                entity_id="haircut", name="Haircut", kind=EntityKind.SERVICE, category="Salon"
            ),
        ]
    )


@pytest.fixture()
def shop_events():
    """Events of tenant shop-1.

    s1 views and carts the mug, then buys it (completed).
    s2 views the tee and carts it, never buys (abandoned).
    s3 carts the tee but orders the mug (converted session, tee not credited).
    s4 books a haircut that is not yet completed.
    One anonymous mug view, and one event on Jan 20 tagged with a campaign.
    """
    spring = MarketingTags(campaign="spring", source="newsletter", medium="email")
    return [
        view("mug", "s1", day=1),
        cart("mug", "s1", day=1),
        view("tee", "s2", day=2),
        cart("tee", "s2", day=2),
        cart("tee", "s3", day=8),
        view("haircut", "s4", day=9),
        view("mug", None, day=9),
        view("mug", "s5", day=20, tags=spring),
    ]


@pytest.fixture()
def shop_transactions():
    spring = MarketingTags(campaign="spring", source="newsletter", medium="email")
    return [
        order("o1", "s1", [("mug", 2, "12.50")], completed=True, day=1),
        order("o2", "s3", [("mug", 1, "12.50")], completed=True, day=8),
        order("b1", "s4", [("haircut", 1, "30.00")], completed=False, day=9),
        order("o3", "s5", [("mug", 1, "12.50")], completed=True, day=20, tags=spring),
    ]


@pytest.fixture()
def repositories(catalog, shop_events, shop_transactions):
    events = InMemoryEventRepository({"shop-1": shop_events}, catalog=catalog)
    transactions = InMemoryTransactionRepository({"shop-1": shop_transactions}, catalog=catalog)
    return events, transactions, catalog


@pytest.fixture()
def report_settings():
    return ReportSettings(
        default_limit=10,
        opportunity_min_views=10,
        opportunity_max_conversion_rate=5.0,
        fetch_workers=2,
        cache_enabled=False,
        cache_ttl_seconds=300,
    )


@pytest.fixture()
def service(repositories, report_settings):
    events, transactions, catalog = repositories
    return FunnelReportService(events, transactions, catalog, report_settings)
