"""
Issue Classification Service

Applies the conversion audit rule set to each enriched conversion action and
records the outcome on the run's AuditResult. Rules run in a fixed order and
only ever append; nothing is deduplicated or removed.

Rules (in order):
- no_value (issue, medium): the action has no default conversion value
- no_conversions (issue, high): zero conversions in the fixed 30-day window
- low_conversion_rate (issue, high): 30-day rate below 1% with more than 100 clicks
- device_optimization (opportunity, medium): at least two devices converted in
  the selected period and the best converts more than 3x the weakest
- declining_trend (issue, high): last week below 70% of the week before

Every action joins summary.activeConversions; actions hit by the first three
rules also join noValueSet, noConversions30Days and lowConvRate respectively.
"""

import logging
from typing import List, Optional

from conversion_audit.models.enums import IssueType, Severity
from conversion_audit.models.schemas import AuditIssue, AuditResult, ConversionAction


logger = logging.getLogger(__name__)


# =============================================================================
# Rule Thresholds
# =============================================================================

# Conversion rate (percent) below which the rate is flagged
LOW_CONVERSION_RATE_THRESHOLD: float = 1.0

# Minimum 30-day clicks before the conversion rate is judged
LOW_CONVERSION_RATE_MIN_CLICKS: int = 100

# Max/min conversions ratio between converting devices that triggers an opportunity
DEVICE_SPREAD_RATIO: float = 3.0

# Minimum number of converting devices needed to compare them
DEVICE_SPREAD_MIN_DEVICES: int = 2

# Last week must be at least this share of the previous week
DECLINING_TREND_RATIO: float = 0.7


# =============================================================================
# Individual Rules
# =============================================================================


def has_low_conversion_rate(action: ConversionAction) -> bool:
    """30-day rate under 1% with enough clicks (> 100) for the rate to mean something."""
    return (
        action.conversionRate < LOW_CONVERSION_RATE_THRESHOLD
        and action.clicks > LOW_CONVERSION_RATE_MIN_CLICKS
    )


def device_spread_ratio(action: ConversionAction) -> Optional[float]:
    """
    Ratio between the best and the weakest converting device.

    Only devices with conversions in the selected period are compared.

    Returns:
        max/min conversions, or None when fewer than two devices converted.
        A single converting device is never compared, however large its share.
    """
    converting = [
        stats.conversions
        for stats in action.devicePerformance.values()
        if stats.conversions > 0
    ]
    if len(converting) < DEVICE_SPREAD_MIN_DEVICES:
        return None
    return max(converting) / min(converting)


def has_device_spread(action: ConversionAction) -> bool:
    ratio = device_spread_ratio(action)
    return ratio is not None and ratio > DEVICE_SPREAD_RATIO


def has_declining_trend(weekly_conversions: List[float]) -> bool:
    """
    Compare the last two weeks of the series.

    Examples:
        >>> has_declining_trend([100, 60])
        True
        >>> has_declining_trend([100, 71])
        False
        >>> has_declining_trend([5])
        False
    """
    if len(weekly_conversions) < 2:
        return False
    last_week, previous_week = weekly_conversions[-1], weekly_conversions[-2]
    return last_week < previous_week * DECLINING_TREND_RATIO


# =============================================================================
# Classification
# =============================================================================


def classify_conversion_action(action: ConversionAction, result: AuditResult) -> None:
    """
    Apply every rule to one action and record the findings on `result`.

    Args:
        action: Fully aggregated conversion action.
        result: Run result; issues, opportunities, summary lists and total
            are appended to / incremented in place.
    """
    summary = result.summary
    name = action.name

    summary.activeConversions.append(action)

    if not action.hasValue:
        summary.noValueSet.append(action)
        result.issues.append(AuditIssue(
            type=IssueType.NO_VALUE,
            severity=Severity.MEDIUM,
            conversion=name,
            message="No conversion value set",
        ))

    if action.conversions == 0:
        summary.noConversions30Days.append(action)
        result.issues.append(AuditIssue(
            type=IssueType.NO_CONVERSIONS,
            severity=Severity.HIGH,
            conversion=name,
            message="No conversions in last 30 days",
        ))

    if has_low_conversion_rate(action):
        summary.lowConvRate.append(action)
        result.issues.append(AuditIssue(
            type=IssueType.LOW_CONVERSION_RATE,
            severity=Severity.HIGH,
            conversion=name,
            message=f"Low conversion rate ({action.conversionRate:.2f}%)",
        ))

    if has_device_spread(action):
        result.opportunities.append(AuditIssue(
            type=IssueType.DEVICE_OPTIMIZATION,
            severity=Severity.MEDIUM,
            conversion=name,
            message="Large performance difference between devices",
        ))

    if has_declining_trend(action.trends.weeklyConversions):
        result.issues.append(AuditIssue(
            type=IssueType.DECLINING_TREND,
            severity=Severity.HIGH,
            conversion=name,
            message="Significant decrease in conversions last week",
        ))

    result.total += 1


def classify_conversion_actions(
    actions: List[ConversionAction],
    result: Optional[AuditResult] = None
) -> AuditResult:
    """
    Classify every action in order.

    Args:
        actions: Aggregated conversion actions, in fetch order.
        result: Result carrying the accumulated device/campaign summaries
            (a fresh one is created when omitted).

    Returns:
        The populated AuditResult.
    """
    result = result if result is not None else AuditResult()
    for action in actions:
        classify_conversion_action(action, result)

    logger.info(
        f"Classified {result.total} conversion actions: "
        f"{len(result.issues)} issues, {len(result.opportunities)} opportunities"
    )
    return result
