# ==============================================================================
# Funnel Analytics Utilities
# ==============================================================================
"""
Shared utilities: configuration, retry policies, schema management and the
fixed-window rate limiter.
"""

from funnelcore.utils.config import (
    PostgresSettings,
    RateLimitSettings,
    ReportSettings,
    Settings,
    ValkeySettings,
    get_settings,
)
from funnelcore.utils.rate_limiter import FixedWindowRateLimiter, RateLimitDecision

__all__ = [
    # Config
    "PostgresSettings",
    "RateLimitSettings",
    "ReportSettings",
    "Settings",
    "ValkeySettings",
    "get_settings",
    # Rate limiting
    "FixedWindowRateLimiter",
    "RateLimitDecision",
]
