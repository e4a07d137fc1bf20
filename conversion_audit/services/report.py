"""
HTML report rendering for the conversion audit.

Builds the e-mail body from a completed AuditResult and its ActionPlan:

- Active conversion actions table (one row per action, or a "Last 30 days" and
  a "Selected Period" row when the selected window differs from the baseline)
- Device performance table
- Campaign performance table, most converting campaign first
- Conversion summary totals
- Action plan (HIGH then MEDIUM), or a congratulation block when all clear

All interpolated text is HTML-escaped. Money-like values are rendered with two
decimals, conversion counts without trailing zeros.

Usage:
    html_body = render_conversion_report(result, plan, windows)
"""

from datetime import date
from html import escape
from typing import List, Optional

from conversion_audit.models.enums import Priority
from conversion_audit.models.schemas import (
    ActionItem,
    ActionPlan,
    AuditResult,
    ConversionAction,
    ReportingWindows,
)


# =============================================================================
# Constants
# =============================================================================

REPORT_TITLE = "🎯 Conversion Tracking Overview"

ERROR_SUBJECT = "Error in Conversion Audit Script"

ERROR_BODY_TEMPLATE = "An error occurred while running the conversion audit script:\n\n{error}"

CONGRATULATIONS_TEXT = (
    "All campaigns are performing well across all primary conversion goals. "
    "Keep monitoring performance and testing new opportunities."
)

ACTION_PLAN_INTRO = (
    "Here are the recommended steps to improve campaign performance across "
    "your primary conversion goals:"
)

EMAIL_STYLES = """<style>
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 20px; }
    .container { max-width: 1200px; margin: 0 auto; padding: 20px; background: #fff; }
    h1 { color: #2c5282; margin-bottom: 20px; border-bottom: 2px solid #edf2f7; padding-bottom: 10px; }
    h2 { color: #2d3748; font-size: 1.5em; margin-top: 30px; }
    h3 { color: #2d3748; font-size: 1.2em; margin-top: 25px; }
    table { width: 100%; border-collapse: collapse; margin: 15px 0; font-size: 0.9em; }
    th, td { padding: 12px; text-align: left; border-bottom: 1px solid #edf2f7; }
    th { background: #f8fafc; font-weight: bold; }
    .period-row { background-color: #f8fafc; }
    .period-indicator { font-style: italic; color: #718096; }
    .good { color: #2f855a; }
    .warning { color: #d97706; }
    .conversion-totals { margin-top: 30px; background: #f8fafc; padding: 20px; border-radius: 8px; }
    .action-plan { margin-top: 40px; padding: 20px; background: #ffffff; border-radius: 8px; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }
    .action-plan h2 { color: #2c5282; margin-bottom: 15px; }
    .action-plan h3 { color: #2d3748; margin: 25px 0 15px 0; }
    .action-plan p { color: #4a5568; margin-bottom: 20px; }
    .action-items { list-style: none; padding: 0; margin: 0; }
    .action-items li { margin: 15px 0; padding: 15px; border-radius: 6px; background: #f8fafc; }
    .action-items.high-priority li { border-left: 4px solid #e53e3e; background: #fff5f5; }
    .action-items.medium-priority li { border-left: 4px solid #d69e2e; background: #fffff0; }
    .quick-tip { display: block; margin-top: 8px; color: #718096; font-style: italic; }
    .affected-items { display: block; margin-top: 8px; color: #4a5568; font-size: 0.9em; }
    .action-plan.success { background: #f0fff4; border: 1px solid #c6f6d5; }
    .action-plan.success h2 { color: #2f855a; }
    .action-plan.success p { color: #276749; }
    .conversion-details { font-size: 0.9em; color: #666; line-height: 1.4; }
    .campaign-performance { margin: 20px 0; }
</style>"""


# =============================================================================
# Formatting Helpers
# =============================================================================


def format_count(value: float) -> str:
    """
    Render a conversion count: whole numbers without decimals, fractional
    (data-driven attribution) counts with at most two.

    Examples:
        >>> format_count(12.0)
        '12'
        >>> format_count(3.5)
        '3.5'
    """
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip('0').rstrip('.')


def format_money(value: float) -> str:
    return f"{value:.2f}"


def format_report_date(day: date) -> str:
    """M/D/YYYY without zero padding, as used in the report subject."""
    return f"{day.month}/{day.day}/{day.year}"


def build_report_subject(subject_prefix: str, day: date) -> str:
    return f"{subject_prefix} - {format_report_date(day)}"


def build_error_body(error: object) -> str:
    return ERROR_BODY_TEMPLATE.format(error=error)


def _status_class(conversions: float) -> str:
    return 'good' if conversions > 0 else 'warning'


def _goal_label(action: ConversionAction) -> str:
    return '🎯 Primary' if action.isPrimary else '⭐ Secondary'


# =============================================================================
# Sections
# =============================================================================


def _render_action_row(
    action: ConversionAction,
    conversions: float,
    value: float,
    period_label: Optional[str] = None,
    row_class: Optional[str] = None
) -> str:
    cells = [
        escape(action.name),
        escape(action.category),
    ]
    row_open = f'<tr class="{row_class}">' if row_class else '<tr>'
    parts = [row_open]
    parts.extend(f'<td>{cell}</td>' for cell in cells)
    parts.append('<td class="good">Active</td>')
    parts.append(f'<td>{_goal_label(action)}</td>')
    parts.append(f'<td>{escape(action.attributionModel)}</td>')
    if period_label:
        parts.append(f'<td class="period-indicator">{period_label}</td>')
    parts.append(f'<td class="{_status_class(conversions)}">{format_count(conversions)}</td>')
    parts.append(f'<td>{format_money(value)}</td>')
    parts.append('</tr>')
    return ''.join(parts)


def render_active_conversions(result: AuditResult, show_period: bool) -> List[str]:
    lines = [
        '<h2>Active Conversion Actions</h2>',
        '<table class="summary-table">',
        '<tr><th>Conversion Action</th><th>Type</th><th>Status</th><th>Goal Type</th>'
        '<th>Attribution Model</th>' + ('<th>Period</th>' if show_period else '') +
        '<th>Conversions</th><th>Value</th></tr>',
    ]

    for action in result.summary.activeConversions:
        if not show_period:
            lines.append(_render_action_row(action, action.conversions, action.value))
            continue
        lines.append(_render_action_row(
            action, action.conversions, action.value, period_label='Last 30 days'
        ))
        lines.append(_render_action_row(
            action, action.periodConversions, action.periodValue,
            period_label='Selected Period', row_class='period-row'
        ))

    lines.append('</table>')
    return lines


def render_device_performance(result: AuditResult) -> List[str]:
    lines = [
        '<div class="device-performance">',
        '<h3>Device Performance</h3>',
        '<table class="summary-table">',
        '<tr><th>Device</th><th>Conversions</th><th>Value</th></tr>',
    ]
    for device, stats in result.summary.devicePerformance.items():
        css = ' class="good"' if stats.conversions > 0 else ''
        lines.append(
            f'<tr><td>{escape(device.capitalize())}</td>'
            f'<td{css}>{format_count(stats.conversions)}</td>'
            f'<td>{format_money(stats.value)}</td></tr>'
        )
    lines.extend(['</table>', '</div>'])
    return lines


def render_campaign_performance(result: AuditResult) -> List[str]:
    lines = [
        '<div class="campaign-performance">',
        '<h3>Campaign Performance</h3>',
        '<table class="summary-table">',
        '<tr><th>Campaign</th><th>Total Conversions</th><th>Total Value</th>'
        '<th>Conversion Actions</th></tr>',
    ]

    # sorted() is stable, so ties keep first-seen order
    campaigns = sorted(
        result.summary.campaignPerformance.items(),
        key=lambda item: item[1].conversions,
        reverse=True,
    )
    for campaign, stats in campaigns:
        details = '<br>'.join(
            f'{escape(name)}: {format_count(contribution.conversions)} '
            f'({format_money(contribution.value)})'
            for name, contribution in stats.conversionActions.items()
            if contribution.conversions > 0
        )
        css = ' class="good"' if stats.conversions > 0 else ''
        lines.append(
            f'<tr><td>{escape(campaign)}</td>'
            f'<td{css}>{format_count(stats.conversions)}</td>'
            f'<td>{format_money(stats.value)}</td>'
            f'<td class="conversion-details">{details}</td></tr>'
        )

    lines.extend(['</table>', '</div>'])
    return lines


def render_conversion_totals(result: AuditResult, show_period: bool) -> List[str]:
    actions = result.summary.activeConversions
    total_conversions = sum(action.conversions for action in actions)
    total_value = sum(action.value for action in actions)

    lines = ['<div class="conversion-totals">', '<h3>Conversion Summary</h3>', '<table class="summary-table">']
    if show_period:
        period_conversions = sum(action.periodConversions for action in actions)
        period_value = sum(action.periodValue for action in actions)
        lines.append('<tr><th></th><th>Last 30 Days</th><th>Selected Period</th></tr>')
        lines.append(
            f'<tr><td>Total Conversions:</td><td>{format_count(total_conversions)}</td>'
            f'<td>{format_count(period_conversions)}</td></tr>'
        )
        lines.append(
            f'<tr><td>Total Value:</td><td>{format_money(total_value)}</td>'
            f'<td>{format_money(period_value)}</td></tr>'
        )
    else:
        lines.append('<tr><th></th><th>Total</th></tr>')
        lines.append(f'<tr><td>Total Conversions:</td><td>{format_count(total_conversions)}</td></tr>')
        lines.append(f'<tr><td>Total Value:</td><td>{format_money(total_value)}</td></tr>')

    lines.extend(['</table>', '</div>'])
    return lines


def _render_action_item(item: ActionItem) -> str:
    parts = [
        '<li>',
        f'<strong>{escape(item.type.value)}:</strong> {escape(item.action)}',
        f'<br><span class="quick-tip">💡 Quick Tip: {escape(item.tip)}</span>',
    ]
    if item.affected:
        affected = ', '.join(escape(name) for name in item.affected)
        parts.append(f'<br><span class="affected-items">Affected campaigns: {affected}</span>')
    parts.append('</li>')
    return ''.join(parts)


def _render_primary_goals(plan: ActionPlan) -> List[str]:
    if not plan.primaryConversions:
        return []
    goals = ', '.join(escape(name) for name in plan.primaryConversions)
    return [f'<p class="primary-goals"><strong>Primary conversion goals:</strong> {goals}</p>']


def render_action_plan(plan: ActionPlan) -> List[str]:
    """Action plan section, headed by the primary goals it was evaluated against."""
    if plan.allClear:
        return [
            '<div class="action-plan success">',
            '<h2>🎉 Congratulations!</h2>',
            f'<p>{CONGRATULATIONS_TEXT}</p>',
            *_render_primary_goals(plan),
            '</div>',
        ]

    lines = [
        '<div class="action-plan">',
        '<h2>📋 Campaign Action Plan</h2>',
        f'<p>{ACTION_PLAN_INTRO}</p>',
    ]
    lines.extend(_render_primary_goals(plan))
    for priority, heading, css in (
        (Priority.HIGH, 'High Priority Actions', 'high-priority'),
        (Priority.MEDIUM, 'Medium Priority Actions', 'medium-priority'),
    ):
        lines.append(f'<h3>{heading}</h3>')
        lines.append(f'<ul class="action-items {css}">')
        lines.extend(_render_action_item(item) for item in plan.by_priority(priority))
        lines.append('</ul>')
    lines.append('</div>')
    return lines


# =============================================================================
# Main Entry Point
# =============================================================================


def render_conversion_report(
    result: AuditResult,
    plan: ActionPlan,
    windows: ReportingWindows
) -> str:
    """
    Render the complete HTML report.

    Args:
        result: Completed audit result.
        plan: Action plan derived from `result`.
        windows: Reporting windows of the run; the selected-period rows and
            columns are only shown when the selected window differs from the
            30-day baseline.

    Returns:
        HTML document as a string. Rendering is deterministic: the same
        inputs always produce the same bytes.
    """
    show_period = windows.differs

    lines: List[str] = [
        '<html>',
        f'<head>{EMAIL_STYLES}</head>',
        '<body>',
        '<div class="container">',
        f'<h1>{REPORT_TITLE}</h1>',
        '<div class="conversion-summary">',
    ]
    lines.extend(render_active_conversions(result, show_period))
    lines.extend(render_device_performance(result))
    lines.extend(render_campaign_performance(result))
    lines.extend(render_conversion_totals(result, show_period))
    lines.extend(render_action_plan(plan))
    lines.extend(['</div>', '</div>', '</body>', '</html>'])

    return "\n".join(lines)
