# ==============================================================================
# funnelcore
# ==============================================================================
"""
Session-attributed conversion funnel analytics.

Joins storefront view and add-to-cart events to orders and bookings through
the browser session, and reports per-entity funnels, ranked lists, chart
series and cross-tenant rollups.
"""

__version__ = "0.1.0"
