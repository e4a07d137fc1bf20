"""
GAQL query module for the conversion audit.

Re-exports the query builders so services import from conversion_audit.queries.

Example usage:
    from conversion_audit.queries import get_device_breakdown_query

    gaql = get_device_breakdown_query('Purchase', windows.selected)
"""

from conversion_audit.queries.gaql_queries import (
    get_account_click_cost_query,
    get_campaign_breakdown_query,
    get_conversion_actions_query,
    get_conversion_totals_query,
    get_device_breakdown_query,
    get_weekly_trend_query,
    quote_gaql_string,
)

__all__ = [
    'get_account_click_cost_query',
    'get_campaign_breakdown_query',
    'get_conversion_actions_query',
    'get_conversion_totals_query',
    'get_device_breakdown_query',
    'get_weekly_trend_query',
    'quote_gaql_string',
]
