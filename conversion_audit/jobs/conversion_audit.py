"""
Conversion Audit Job

Runs one complete conversion-tracking audit for the configured Google Ads
account and e-mails the HTML report.

Pipeline:
1. Resolve the selected and 30-day baseline windows
2. Collect every enabled conversion action (fatal on failure)
3. Aggregate device, trend, period, 30-day and campaign slices per action
4. Classify issues and opportunities
5. Derive the action plan
6. Render the report and e-mail it when EMAIL__ENABLED

Any failure before the report is rendered aborts the run: it is logged with
its traceback and an error notification is e-mailed to EMAIL__RECIPIENT
(whether or not report delivery is enabled). Failures of a single metric slice
are not fatal; they are logged and the slice stays at zero.

Usage:
    from conversion_audit.jobs.conversion_audit import run_conversion_audit

    result = run_conversion_audit()
    if result['success']:
        print(f"{result['total']} actions, {result['issues']} issues")

    # With a stub data source and fixed date (tests)
    result = run_conversion_audit(data_source=stub, today=date(2026, 10, 19))
"""

import logging
import time
from datetime import date
from typing import Any, Dict, Optional

from conversion_audit.core.config import Settings, get_settings
from conversion_audit.core.data_source import DataSource, GoogleAdsDataSource
from conversion_audit.jobs.email_notifier import EmailNotifier
from conversion_audit.models.schemas import AuditResult
from conversion_audit.services.action_plan import build_action_plan
from conversion_audit.services.aggregation import aggregate_conversion_actions
from conversion_audit.services.classification import classify_conversion_actions
from conversion_audit.services.conversion_actions import collect_conversion_actions
from conversion_audit.services.date_range import resolve_reporting_windows
from conversion_audit.services.report import (
    ERROR_SUBJECT,
    build_error_body,
    build_report_subject,
    render_conversion_report,
)


logger = logging.getLogger(__name__)


def run_conversion_audit(
    settings: Optional[Settings] = None,
    data_source: Optional[DataSource] = None,
    notifier: Optional[EmailNotifier] = None,
    today: Optional[date] = None
) -> Dict[str, Any]:
    """
    Run the audit once.

    Args:
        settings: Configuration (default: get_settings()).
        data_source: Reporting data source (default: Google Ads client built
            from GOOGLE_ADS__* settings).
        notifier: E-mail transport (default: SMTP from SMTP__* settings).
        today: Execution date (default: date.today()).

    Returns:
        Dict with the following keys:
        - success: bool indicating whether the audit completed
        - total: Number of conversion actions audited
        - issues: Number of issues found
        - opportunities: Number of opportunities found
        - action_items: Number of action plan items
        - email_sent: Whether the report (or error notification) was delivered
        - duration_seconds: Wall-clock run time
        - error: Error message (only when success is False)

    This function never raises.
    """
    started = time.monotonic()

    if settings is None:
        try:
            settings = get_settings()
        except Exception as e:
            # Without settings there is no recipient to notify
            logger.exception(f"Invalid configuration: {e}")
            return {
                'success': False,
                'error': f'Invalid configuration: {e}',
                'email_sent': False,
                'duration_seconds': round(time.monotonic() - started, 2),
            }

    notifier = notifier or EmailNotifier.from_settings(settings)
    today = today or date.today()

    logger.info("Starting conversion audit")

    try:
        windows = resolve_reporting_windows(settings.audit_period, today)
        logger.info(
            f"Selected period {windows.selected.start} to {windows.selected.end}, "
            f"baseline {windows.baseline.start} to {windows.baseline.end}"
        )

        source = data_source or GoogleAdsDataSource.from_settings(settings.google_ads)

        actions = collect_conversion_actions(source)

        result = AuditResult()
        aggregate_conversion_actions(source, actions, result.summary, windows)
        classify_conversion_actions(actions, result)
        logger.info(f"Active conversions: {len(result.summary.activeConversions)}")

        plan = build_action_plan(result, settings.goals.primary_conversion)
        html_body = render_conversion_report(result, plan, windows)

    except Exception as e:
        logger.exception(f"Conversion audit failed: {e}")
        error_sent = notifier.send(
            settings.email.recipient,
            ERROR_SUBJECT,
            text_body=build_error_body(e),
        )
        return {
            'success': False,
            'error': str(e),
            'email_sent': error_sent,
            'duration_seconds': round(time.monotonic() - started, 2),
        }

    email_sent = False
    if settings.email.enabled:
        email_sent = notifier.send(
            settings.email.recipient,
            build_report_subject(settings.email.subject_prefix, today),
            html_body=html_body,
        )
    else:
        logger.info("Report e-mail disabled, skipping delivery")

    duration = round(time.monotonic() - started, 2)
    logger.info(f"Conversion audit completed in {duration} seconds")

    return {
        'success': True,
        'total': result.total,
        'issues': len(result.issues),
        'opportunities': len(result.opportunities),
        'action_items': len(plan.items),
        'email_sent': email_sent,
        'duration_seconds': duration,
    }
