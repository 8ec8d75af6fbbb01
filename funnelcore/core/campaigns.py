# ==============================================================================
# Campaign Breakdown
# ==============================================================================
"""
Funnel metrics grouped by UTM campaign, source and medium.

Only events carrying a campaign or a source are considered. A completed and
paid transaction is credited to a campaign group once when its session
produced at least one event in that group, so a session with several tagged
events does not multiply the order count.
"""

from decimal import Decimal
from typing import Sequence

from funnelcore.core.models import (
    CampaignFunnelMetric,
    EventType,
    ProductEvent,
    SessionId,
    Transaction,
)

GroupKey = tuple[str | None, str | None, str | None]


def _group_key(event: ProductEvent) -> GroupKey | None:
    tags = event.tags
    if tags is None or (tags.campaign is None and tags.source is None):
        return None
    return (tags.campaign, tags.source, tags.medium)


def campaign_breakdown(
    events: Sequence[ProductEvent], transactions: Sequence[Transaction]
) -> list[CampaignFunnelMetric]:
    """
    Group tagged events by campaign and credit completed transactions.

    Args:
        events: Events for one tenant and window
        transactions: Transactions for the same tenant and window

    Returns:
        Campaign metrics, highest revenue first, ties by campaign key
    """
    completed_by_session: dict[SessionId, list[Transaction]] = {}
    for transaction in transactions:
        if transaction.session_id is not None and transaction.is_completed_paid:
            completed_by_session.setdefault(transaction.session_id, []).append(transaction)

    groups: dict[GroupKey, CampaignFunnelMetric] = {}
    sessions_by_group: dict[GroupKey, set[SessionId]] = {}

    for event in events:
        key = _group_key(event)
        if key is None:
            continue
        metric = groups.get(key)
        if metric is None:
            campaign, source, medium = key
            metric = CampaignFunnelMetric(campaign=campaign, source=source, medium=medium)
            groups[key] = metric
            sessions_by_group[key] = set()
        if event.event_type == EventType.VIEW:
            metric.views += 1
        elif event.event_type == EventType.ADD_TO_CART:
            metric.add_to_carts += 1
        if event.session_id is not None:
            sessions_by_group[key].add(event.session_id)

    for key, metric in groups.items():
        credited: set[str] = set()
        revenue = Decimal("0")
        for session_id in sessions_by_group[key]:
            for transaction in completed_by_session.get(session_id, ()):
                if transaction.id in credited:
                    continue
                credited.add(transaction.id)
                revenue += transaction.total
        metric.transactions = len(credited)
        metric.revenue = revenue

    return sorted(groups.values(), key=lambda m: (-m.revenue, m.key))
