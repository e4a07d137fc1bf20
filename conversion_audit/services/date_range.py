"""
Reporting window resolution.

Computes the two date windows of an audit run:
- selected: the explicit START_DATE..END_DATE range when both are set,
  otherwise the rolling [today - DAYS, today] window
- baseline: always [today - 30, today], used for the "last 30 days" metrics
  regardless of the configured period

Both ends are inclusive.
"""

from datetime import date, timedelta
from typing import Optional

from conversion_audit.core.config import AuditPeriodSettings, BASELINE_WINDOW_DAYS
from conversion_audit.models.schemas import DateRange, ReportingWindows


def resolve_selected_window(period: AuditPeriodSettings, today: date) -> DateRange:
    """
    Resolve the configured reporting period.

    Args:
        period: AUDIT_PERIOD settings.
        today: Execution date.

    Returns:
        DateRange for the selected period.

    Example:
        >>> resolve_selected_window(AuditPeriodSettings(days=7), date(2026, 10, 19))
        DateRange(start=datetime.date(2026, 10, 12), end=datetime.date(2026, 10, 19))
    """
    if period.start_date and period.end_date:
        return DateRange(start=period.start_date, end=period.end_date)
    return DateRange(start=today - timedelta(days=period.days), end=today)


def resolve_baseline_window(today: date) -> DateRange:
    """The fixed trailing-30-day window ending today."""
    return DateRange(start=today - timedelta(days=BASELINE_WINDOW_DAYS), end=today)


def resolve_reporting_windows(
    period: AuditPeriodSettings,
    today: Optional[date] = None
) -> ReportingWindows:
    """
    Resolve both windows of a run.

    Args:
        period: AUDIT_PERIOD settings.
        today: Execution date (default: date.today()).

    Returns:
        ReportingWindows with the selected and baseline ranges.
    """
    today = today or date.today()
    return ReportingWindows(
        selected=resolve_selected_window(period, today),
        baseline=resolve_baseline_window(today),
    )
