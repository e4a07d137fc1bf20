"""
Enumeration definitions for the conversion audit.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in pydantic models and compare equal to the raw values returned by the
reporting API.
"""

from enum import Enum


class Device(str, Enum):
    """
    Client device categories tracked in device breakdowns.

    Only these three are folded into device performance; any other value
    reported by the API (UNKNOWN, OTHER, CONNECTED_TV, ...) is ignored.
    """
    MOBILE = "MOBILE"
    DESKTOP = "DESKTOP"
    TABLET = "TABLET"


class Severity(str, Enum):
    """Severity attached to issues and opportunities."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IssueType(str, Enum):
    """
    Detection rule that produced an issue or opportunity.

    - no_value: Conversion action has no default value
    - no_conversions: No conversions in the fixed 30-day window
    - low_conversion_rate: Rate below 1% with more than 100 clicks
    - device_optimization: Large conversion spread between devices (opportunity)
    - declining_trend: Last week below 70% of the week before
    """
    NO_VALUE = "no_value"
    NO_CONVERSIONS = "no_conversions"
    LOW_CONVERSION_RATE = "low_conversion_rate"
    DEVICE_OPTIMIZATION = "device_optimization"
    DECLINING_TREND = "declining_trend"


class Priority(str, Enum):
    """Action plan item priority."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


class ActionItemType(str, Enum):
    """Action plan item categories, in the order they are evaluated."""
    NO_PRIMARY_GOALS = "No Primary Goals"
    NO_CONVERSIONS = "No Conversions"
    MISSING_PRIMARY_CONVERSION = "Missing Primary Conversion"
    MISSING_VALUES = "Missing Values"
    CAMPAIGN_DISTRIBUTION = "Campaign Distribution"
