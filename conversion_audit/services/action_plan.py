"""
Action plan derivation.

Turns a completed AuditResult into prioritized recommendations. Items are
produced in a fixed order:

1. HIGH   No Primary Goals           - no primary conversion configured or flagged
2. HIGH   No Conversions             - campaigns with zero total conversions
3. MEDIUM Missing Primary Conversion - per primary conversion, campaigns without it
4. MEDIUM Missing Values             - converting campaigns with zero value
5. MEDIUM Campaign Distribution      - campaigns above 80% of all conversions

An empty plan means every check passed.
"""

import logging
from typing import List, Optional

from conversion_audit.models.enums import ActionItemType, Priority
from conversion_audit.models.schemas import ActionItem, ActionPlan, AuditResult


logger = logging.getLogger(__name__)


# Share of all campaign conversions above which a campaign is dominant
DOMINANT_CAMPAIGN_SHARE: float = 0.8

DOMINANT_CAMPAIGN_SUFFIX = " (Dominant conversion source)"

NO_PRIMARY_GOALS_AFFECTED = "No primary conversion actions defined"


def determine_primary_conversions(
    result: AuditResult,
    primary_conversion: Optional[str] = None
) -> List[str]:
    """
    Names of the conversion actions treated as primary goals.

    Args:
        result: Completed audit result.
        primary_conversion: GOALS.PRIMARY_CONVERSION override.

    Returns:
        [primary_conversion] when the override is set, otherwise every action
        flagged isPrimary, in fetch order (possibly empty).
    """
    if primary_conversion:
        return [primary_conversion]
    return [action.name for action in result.summary.activeConversions if action.isPrimary]


def build_action_plan(
    result: AuditResult,
    primary_conversion: Optional[str] = None
) -> ActionPlan:
    """
    Derive the prioritized action plan.

    Args:
        result: Completed audit result.
        primary_conversion: Optional single primary conversion override.

    Returns:
        ActionPlan; `allClear` is true when no item was produced.
    """
    campaigns = result.summary.campaignPerformance
    primary_conversions = determine_primary_conversions(result, primary_conversion)
    items: List[ActionItem] = []

    if not primary_conversions:
        items.append(ActionItem(
            priority=Priority.HIGH,
            type=ActionItemType.NO_PRIMARY_GOALS,
            action="Set up primary conversion goals",
            tip="Define which conversion actions are your main campaign objectives",
            affected=[NO_PRIMARY_GOALS_AFFECTED],
        ))

    no_conversions = [name for name, stats in campaigns.items() if stats.conversions == 0]
    if no_conversions:
        items.append(ActionItem(
            priority=Priority.HIGH,
            type=ActionItemType.NO_CONVERSIONS,
            action=f"Review {len(no_conversions)} campaign(s) with no conversions",
            tip="Check campaign settings, targeting, and landing pages for these campaigns",
            affected=no_conversions,
        ))

    for primary in primary_conversions:
        without_primary = []
        for name, stats in campaigns.items():
            contribution = stats.conversionActions.get(primary)
            if contribution is None or contribution.conversions == 0:
                without_primary.append(name)

        if without_primary:
            items.append(ActionItem(
                priority=Priority.MEDIUM,
                type=ActionItemType.MISSING_PRIMARY_CONVERSION,
                action=f"Review {len(without_primary)} campaign(s) without {primary}",
                tip="Check why these campaigns aren't generating this primary conversion type",
                affected=without_primary,
            ))

    without_values = [
        name for name, stats in campaigns.items()
        if stats.conversions > 0 and stats.value == 0
    ]
    if without_values:
        items.append(ActionItem(
            priority=Priority.MEDIUM,
            type=ActionItemType.MISSING_VALUES,
            action=f"Set conversion values for {len(without_values)} converting campaign(s)",
            tip="Adding conversion values will help optimize campaign performance",
            affected=without_values,
        ))

    total_conversions = sum(stats.conversions for stats in campaigns.values())
    dominant = []
    if total_conversions > 0:
        dominant = [
            name for name, stats in campaigns.items()
            if stats.conversions / total_conversions > DOMINANT_CAMPAIGN_SHARE
        ]
    if dominant:
        items.append(ActionItem(
            priority=Priority.MEDIUM,
            type=ActionItemType.CAMPAIGN_DISTRIBUTION,
            action="Review budget allocation across campaigns",
            tip=(
                "Some campaigns are generating most conversions. Consider redistributing "
                "budget or applying successful strategies to other campaigns"
            ),
            affected=[f"{name}{DOMINANT_CAMPAIGN_SUFFIX}" for name in dominant],
        ))

    logger.info(f"Action plan: {len(items)} item(s)")
    return ActionPlan(primaryConversions=primary_conversions, items=items)
