"""
Metrics aggregation service for the conversion audit.

For each conversion action this module fetches and folds five independent
metric slices, enriching the action and accumulating the run's summaries:

1. Device slice: conversions/value per device (selected period), folded into the
   action's devicePerformance and the summary devicePerformance totals
2. Weekly trend slice: conversions/value per week (selected period), appended
   in week order
3. Selected-period totals: conversions/value for the action plus account-wide
   clicks and cost, giving periodConversionRate and periodCostPerConversion
4. Fixed 30-day totals: the same computation over the baseline window
5. Campaign breakdown: conversions/value per campaign (selected period), folded
   into the summary campaignPerformance

Each slice is isolated: a failing slice is logged and leaves its own fields at
zero while the remaining slices still run. Within the period and 30-day slices
the conversion totals are stored before the account click/cost query runs, so
a click/cost failure zeroes only clicks, cost and the derived rates.

Derived Metrics:
- conversion_rate = conversions / clicks * 100 (0 when clicks = 0)
- cost_per_conversion = cost / conversions (0 when conversions = 0)
- cost = sum(cost_micros) / 1,000,000

Clicks and cost are summed over all enabled campaigns in the window, not
scoped to the conversion action, because neither is attributable to a single
conversion action.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from conversion_audit.core.data_source import DataSource, get_number, get_text
from conversion_audit.models.enums import Device
from conversion_audit.models.schemas import (
    AuditSummary,
    CampaignConversionStats,
    CampaignPerformance,
    ConversionAction,
    DateRange,
    DeviceStats,
    ReportingWindows,
)
from conversion_audit.queries.gaql_queries import (
    get_account_click_cost_query,
    get_campaign_breakdown_query,
    get_conversion_totals_query,
    get_device_breakdown_query,
    get_weekly_trend_query,
)


logger = logging.getLogger(__name__)


MICROS_PER_UNIT = 1_000_000

TRACKED_DEVICES = frozenset(device.value for device in Device)

# Slice labels used in logs and in the list of failed slices
SLICE_DEVICE = 'device'
SLICE_TREND = 'trend'
SLICE_PERIOD = 'period'
SLICE_BASELINE = '30-day'
SLICE_CAMPAIGN = 'campaign'


# =============================================================================
# Window Metrics
# =============================================================================


@dataclass
class WindowMetrics:
    """
    Conversion metrics for one conversion action over one window.

    Attributes:
        conversions: All conversions of the action in the window.
        value: All conversions value of the action in the window.
        clicks: Clicks over all enabled campaigns in the window.
        cost: Cost over all enabled campaigns in the window, in account currency.
        conversion_rate: conversions / clicks * 100, 0 when clicks = 0.
        cost_per_conversion: cost / conversions, 0 when conversions = 0.
    """
    conversions: float = 0.0
    value: float = 0.0
    clicks: float = 0.0
    cost: float = 0.0
    conversion_rate: float = 0.0
    cost_per_conversion: float = 0.0


def calculate_conversion_rate(conversions: float, clicks: float) -> float:
    """Conversion rate in percent; 0.0 when there are no clicks. Not capped at 100."""
    return conversions / clicks * 100 if clicks > 0 else 0.0


def calculate_cost_per_conversion(cost: float, conversions: float) -> float:
    """Cost per conversion; 0.0 when there are no conversions."""
    return cost / conversions if conversions > 0 else 0.0


def fetch_conversion_totals(
    source: DataSource,
    conversion_name: str,
    window: DateRange
) -> Tuple[float, float]:
    """Conversions and value of one action over the window."""
    conversions = 0.0
    value = 0.0
    # The totals query yields one aggregate row; the last row wins if more arrive
    for row in source.query(get_conversion_totals_query(conversion_name, window)):
        conversions = get_number(row, 'metrics.all_conversions')
        value = get_number(row, 'metrics.all_conversions_value')
    return conversions, value


def fetch_account_click_cost(source: DataSource, window: DateRange) -> Tuple[float, float]:
    """Clicks and cost summed over all enabled campaigns in the window."""
    clicks = 0.0
    cost = 0.0
    for row in source.query(get_account_click_cost_query(window)):
        clicks += get_number(row, 'metrics.clicks')
        cost += get_number(row, 'metrics.cost_micros') / MICROS_PER_UNIT
    return clicks, cost


def derive_rates(metrics: WindowMetrics) -> WindowMetrics:
    metrics.conversion_rate = calculate_conversion_rate(metrics.conversions, metrics.clicks)
    metrics.cost_per_conversion = calculate_cost_per_conversion(metrics.cost, metrics.conversions)
    return metrics


def compute_window_metrics(
    source: DataSource,
    conversion_name: str,
    window: DateRange
) -> WindowMetrics:
    """
    Compute conversion totals and derived rates for one action over one window.

    This single function serves both the selected period and the fixed 30-day
    baseline, so the two metric sets cannot drift apart.

    Args:
        source: Reporting data source.
        conversion_name: Conversion action name.
        window: Window to aggregate.

    Returns:
        WindowMetrics for the window.

    Raises:
        Exception: Whatever the data source raises for either query.

    Example:
        >>> metrics = compute_window_metrics(source, 'Purchase', windows.baseline)
        >>> metrics.conversion_rate
        2.5
    """
    metrics = WindowMetrics()
    metrics.conversions, metrics.value = fetch_conversion_totals(source, conversion_name, window)
    metrics.clicks, metrics.cost = fetch_account_click_cost(source, window)
    return derive_rates(metrics)


def fold_window_metrics(
    source: DataSource,
    action: ConversionAction,
    window: DateRange,
    apply_metrics: Callable[[ConversionAction, WindowMetrics], None]
) -> None:
    """
    Fold one window's metrics into the action in two steps.

    The action's conversions and value are stored as soon as the totals query
    returns. Clicks, cost and the derived rates are stored only after the
    account click/cost query also succeeds, so a failure there leaves them at
    zero without discarding the conversion totals.

    Args:
        source: Reporting data source.
        action: Conversion action; enriched in place.
        window: Window to aggregate.
        apply_metrics: apply_period_metrics or apply_baseline_metrics.
    """
    metrics = WindowMetrics()
    metrics.conversions, metrics.value = fetch_conversion_totals(source, action.name, window)
    apply_metrics(action, metrics)

    metrics.clicks, metrics.cost = fetch_account_click_cost(source, window)
    apply_metrics(action, derive_rates(metrics))


def apply_period_metrics(action: ConversionAction, metrics: WindowMetrics) -> None:
    """Store selected-period metrics on the action."""
    action.periodConversions = metrics.conversions
    action.periodValue = metrics.value
    action.periodClicks = metrics.clicks
    action.periodConversionRate = metrics.conversion_rate
    action.periodCostPerConversion = metrics.cost_per_conversion


def apply_baseline_metrics(action: ConversionAction, metrics: WindowMetrics) -> None:
    """Store fixed 30-day metrics on the action."""
    action.conversions = metrics.conversions
    action.value = metrics.value
    action.clicks = metrics.clicks
    action.conversionRate = metrics.conversion_rate
    action.costPerConversion = metrics.cost_per_conversion


# =============================================================================
# Slice Folding
# =============================================================================


def fold_device_breakdown(
    source: DataSource,
    action: ConversionAction,
    summary: AuditSummary,
    window: DateRange
) -> None:
    """
    Fold the per-device slice into the action and the summary totals.

    Only MOBILE, DESKTOP and TABLET are folded; other devices are skipped.
    Negative figures (conversion adjustments) are clamped to 0. All rows are
    read before anything is stored, so the action and the summary are either
    both updated or both left untouched. The action's entry for a device is
    replaced by the last row for that device, the summary entry is added to.
    """
    rows = source.query(get_device_breakdown_query(action.name, window))

    device_stats = {}
    for row in rows:
        device = get_text(row, 'segments.device')
        if device not in TRACKED_DEVICES:
            continue
        device_stats[device] = DeviceStats(
            conversions=max(get_number(row, 'metrics.all_conversions'), 0.0),
            value=max(get_number(row, 'metrics.all_conversions_value'), 0.0),
        )

    for device, stats in device_stats.items():
        action.devicePerformance[device] = stats

        totals = summary.devicePerformance.setdefault(device, DeviceStats())
        totals.conversions += stats.conversions
        totals.value += stats.value


def fold_weekly_trend(
    source: DataSource,
    action: ConversionAction,
    window: DateRange
) -> None:
    """Append weekly conversions/value in week order. Missing weeks are not filled."""
    rows = source.query(get_weekly_trend_query(action.name, window))
    for row in rows:
        action.trends.weeklyConversions.append(get_number(row, 'metrics.all_conversions'))
        action.trends.weeklyValue.append(get_number(row, 'metrics.all_conversions_value'))


def fold_campaign_breakdown(
    source: DataSource,
    action: ConversionAction,
    summary: AuditSummary,
    window: DateRange
) -> None:
    """
    Fold the per-campaign slice into the summary campaignPerformance.

    A campaign entry is created the first time the campaign is seen. Campaign
    totals accumulate; the action's contribution under conversionActions is
    overwritten by each row (last row wins).
    """
    rows = source.query(get_campaign_breakdown_query(action.name, window))
    for row in rows:
        campaign_name = get_text(row, 'campaign.name')
        conversions = get_number(row, 'metrics.all_conversions')
        value = get_number(row, 'metrics.all_conversions_value')

        campaign = summary.campaignPerformance.get(campaign_name)
        if campaign is None:
            campaign = CampaignPerformance()
            summary.campaignPerformance[campaign_name] = campaign

        campaign.conversions += conversions
        campaign.value += value
        campaign.conversionActions[action.name] = CampaignConversionStats(
            conversions=conversions,
            value=value,
        )


# =============================================================================
# Main Entry Points
# =============================================================================


def aggregate_conversion_action(
    source: DataSource,
    action: ConversionAction,
    summary: AuditSummary,
    windows: ReportingWindows
) -> List[str]:
    """
    Enrich one conversion action with all five metric slices.

    Args:
        source: Reporting data source.
        action: Conversion action skeleton; enriched in place.
        summary: Run summary; devicePerformance and campaignPerformance are
            accumulated in place.
        windows: Selected and baseline windows.

    Returns:
        Labels of the slices that failed (empty when all succeeded).
    """
    slices: Sequence[Tuple[str, Callable[[], None]]] = (
        (SLICE_DEVICE, lambda: fold_device_breakdown(source, action, summary, windows.selected)),
        (SLICE_TREND, lambda: fold_weekly_trend(source, action, windows.selected)),
        (SLICE_PERIOD, lambda: fold_window_metrics(
            source, action, windows.selected, apply_period_metrics
        )),
        (SLICE_BASELINE, lambda: fold_window_metrics(
            source, action, windows.baseline, apply_baseline_metrics
        )),
        (SLICE_CAMPAIGN, lambda: fold_campaign_breakdown(source, action, summary, windows.selected)),
    )

    failed = []
    for label, run_slice in slices:
        try:
            run_slice()
        except Exception as e:
            logger.warning(f"Error getting {label} stats for conversion action {action.name}: {e}")
            failed.append(label)
    return failed


def aggregate_conversion_actions(
    source: DataSource,
    actions: List[ConversionAction],
    summary: AuditSummary,
    windows: ReportingWindows
) -> None:
    """Enrich every conversion action in order, accumulating into `summary`."""
    for action in actions:
        failed = aggregate_conversion_action(source, action, summary, windows)
        if failed:
            logger.info(f"{action.name}: {len(failed)} metric slice(s) defaulted to zero")
