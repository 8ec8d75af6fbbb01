# ==============================================================================
# Tests for Ranked Lists
# ==============================================================================
"""
Unit tests for rank_entities().

Tests cover:
- Ordering and tie-breaks of the four lists
- Opportunity and underperforming filters
- Truncation to the limit
- Dropping entities missing from the catalog
"""

import logging
from decimal import Decimal

from funnelcore.core.models import EntityFunnelMetric, EntityMetadata
from funnelcore.core.ranking import RankingThresholds, join_catalog, rank_entities
from funnelcore.exceptions import DataInconsistency


def metric(entity_id, views=0, carts=0, views_attributed=0, booked=0):
    return EntityFunnelMetric(
        entity_id=entity_id,
        views=views,
        add_to_carts=carts,
        views_attributed_to_transaction=views_attributed,
        transactions_booked=booked,
        revenue=Decimal("0"),
    )


def catalog_for(*entity_ids):
    return {
        entity_id: EntityMetadata(entity_id=entity_id, name=entity_id.upper())
        for entity_id in entity_ids
    }


def ids(rows):
    return [row.metric.entity_id for row in rows]


class TestOrdering:
    """Tests for sort order and tie-breaks."""

    def test_best_sellers_ties_by_entity_id(self):
        rows = [metric("c", booked=2), metric("a", booked=2), metric("b", booked=5)]
        metrics = {m.entity_id: m for m in rows}
        lists, _ = rank_entities(metrics, catalog_for("a", "b", "c"), limit=10)
        assert ids(lists.best_sellers) == ["b", "a", "c"]

    def test_most_viewed(self):
        metrics = {m.entity_id: m for m in [metric("a", views=1), metric("b", views=9)]}
        lists, _ = rank_entities(metrics, catalog_for("a", "b"), limit=10)
        assert ids(lists.most_viewed) == ["b", "a"]

    def test_limit_truncates_every_list(self):
        metrics = {
            f"e{i}": metric(f"e{i}", views=20 + i, carts=1) for i in range(5)
        }
        lists, _ = rank_entities(metrics, catalog_for(*metrics), limit=2)
        assert ids(lists.most_viewed) == ["e4", "e3"]
        assert ids(lists.opportunity) == ["e4", "e3"]
        assert ids(lists.underperforming) == ["e0", "e1"]
        assert len(lists.best_sellers) == 2


class TestFilters:
    """Tests for the opportunity and underperforming filters."""

    def test_opportunity_needs_traffic_and_low_conversion(self):
        metrics = {
            m.entity_id: m
            for m in [
                metric("low-traffic", views=9),
                metric("converting", views=20, views_attributed=1),  # 5.0%
                metric("weak", views=40, views_attributed=1),  # 2.5%
            ]
        }
        lists, _ = rank_entities(metrics, catalog_for(*metrics), limit=10)
        assert ids(lists.opportunity) == ["weak"]

    def test_custom_thresholds(self):
        metrics = {"a": metric("a", views=3)}
        thresholds = RankingThresholds(opportunity_min_views=2, opportunity_max_conversion_rate=1.0)
        lists, _ = rank_entities(metrics, catalog_for("a"), limit=10, thresholds=thresholds)
        assert ids(lists.opportunity) == ["a"]

    def test_underperforming_carted_but_never_booked(self):
        metrics = {
            m.entity_id: m
            for m in [
                metric("sold", carts=5, booked=1),
                metric("stuck", carts=2),
                metric("stuck-more", carts=4),
                metric("ignored", views=10),
            ]
        }
        lists, _ = rank_entities(metrics, catalog_for(*metrics), limit=10)
        assert ids(lists.underperforming) == ["stuck-more", "stuck"]


class TestCatalogJoin:
    """Tests for display metadata and missing entities."""

    def test_rows_carry_display_data(self):
        catalog = {
            "a": EntityMetadata(entity_id="a", name="Alpha", category="Tools", image="a.png")
        }
        rows, missing = join_catalog({"a": metric("a")}, catalog)
        assert missing == []
        assert (rows[0].name, rows[0].category, rows[0].image) == ("Alpha", "Tools", "a.png")

    def test_missing_entities_are_dropped_and_logged(self, caplog):
        metrics = {m.entity_id: m for m in [metric("gone", booked=9), metric("kept", booked=1)]}
        with caplog.at_level(logging.WARNING, logger="funnelcore.core.ranking"):
            lists, missing = rank_entities(metrics, catalog_for("kept"), limit=10)
        assert missing == ["gone"]
        assert ids(lists.best_sellers) == ["kept"]
        assert "missing from catalog" in caplog.text

    def test_missing_entities_logged_as_data_inconsistency(self, caplog):
        metrics = {"gone": metric("gone"), "lost": metric("lost"), "kept": metric("kept")}
        with caplog.at_level(logging.WARNING, logger="funnelcore.core.ranking"):
            rank_entities(metrics, catalog_for("kept"), limit=10)
        (record,) = [r for r in caplog.records if r.name == "funnelcore.core.ranking"]
        inconsistency = record.args[0]
        assert isinstance(inconsistency, DataInconsistency)
        assert inconsistency.missing_ids == ["gone", "lost"]
        assert "2 entities missing from catalog" in record.getMessage()
