"""
GAQL query builders for the conversion audit.

Provides the fixed query contract between the audit and the reporting backend.
Each function returns a complete GAQL string for one query shape, parameterized
by a DateRange predicate and/or a conversion action name:

- Conversion action list: enabled conversion actions and their configuration
- Device breakdown: conversions/value per device for one action
- Weekly trend: conversions/value per week for one action, week ascending
- Conversion totals: conversions/value for one action over a window
  (used for both the selected period and the fixed 30-day window)
- Account click/cost totals: clicks and cost over enabled campaigns in a window
- Campaign breakdown: conversions/value per campaign for one action,
  conversions descending

This module keeps query text out of the services so the services only deal
with rows.
"""

from conversion_audit.models.schemas import DateRange


# =============================================================================
# Helpers
# =============================================================================

def quote_gaql_string(value: str) -> str:
    """
    Quote a value as a GAQL string literal.

    Backslashes and single quotes are escaped so conversion action names are
    matched verbatim.

    Example:
        >>> quote_gaql_string("Mike's Leads")
        "'Mike\\\\'s Leads'"
    """
    escaped = value.replace('\\', '\\\\').replace("'", "\\'")
    return f"'{escaped}'"


# =============================================================================
# CONVERSION ACTION LIST
# =============================================================================

def get_conversion_actions_query() -> str:
    """Enabled conversion actions with their static configuration."""
    return """
    SELECT
        conversion_action.id,
        conversion_action.name,
        conversion_action.category,
        conversion_action.status,
        conversion_action.primary_for_goal,
        conversion_action.include_in_conversions_metric,
        conversion_action.counting_type,
        conversion_action.value_settings.default_value,
        conversion_action.attribution_model_settings.attribution_model,
        conversion_action.type
    FROM conversion_action
    WHERE conversion_action.status = 'ENABLED'
    """


# =============================================================================
# PER-ACTION SLICES
# =============================================================================

def get_device_breakdown_query(conversion_name: str, window: DateRange) -> str:
    """
    Conversions and value per device for one conversion action.

    Args:
        conversion_name: Conversion action name (matched exactly).
        window: Selected reporting period.
    """
    return f"""
    SELECT
        segments.conversion_action_name,
        segments.device,
        metrics.all_conversions,
        metrics.all_conversions_value
    FROM customer
    WHERE segments.conversion_action_name = {quote_gaql_string(conversion_name)}
      AND {window.predicate}
    """


def get_weekly_trend_query(conversion_name: str, window: DateRange) -> str:
    """Weekly conversions and value for one conversion action, oldest week first."""
    return f"""
    SELECT
        segments.conversion_action_name,
        segments.week,
        metrics.all_conversions,
        metrics.all_conversions_value
    FROM customer
    WHERE segments.conversion_action_name = {quote_gaql_string(conversion_name)}
      AND {window.predicate}
    ORDER BY segments.week
    """


def get_conversion_totals_query(conversion_name: str, window: DateRange) -> str:
    """
    Total conversions and value for one conversion action over a window.

    Used for both the selected period and the fixed 30-day baseline.
    """
    return f"""
    SELECT
        segments.conversion_action_name,
        metrics.all_conversions,
        metrics.all_conversions_value
    FROM customer
    WHERE segments.conversion_action_name = {quote_gaql_string(conversion_name)}
      AND {window.predicate}
    """


def get_account_click_cost_query(window: DateRange) -> str:
    """
    Clicks and cost over all enabled campaigns in a window.

    Not scoped to a conversion action: clicks and cost cannot be attributed
    to a single conversion action.
    """
    return f"""
    SELECT
        metrics.clicks,
        metrics.cost_micros
    FROM campaign
    WHERE campaign.status = 'ENABLED'
      AND {window.predicate}
    """


def get_campaign_breakdown_query(conversion_name: str, window: DateRange) -> str:
    """Conversions and value per enabled campaign for one conversion action."""
    return f"""
    SELECT
        campaign.name,
        segments.conversion_action_name,
        metrics.all_conversions,
        metrics.all_conversions_value
    FROM campaign
    WHERE campaign.status = 'ENABLED'
      AND segments.conversion_action_name = {quote_gaql_string(conversion_name)}
      AND {window.predicate}
    ORDER BY metrics.all_conversions DESC
    """
