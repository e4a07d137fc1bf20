"""
Conversion Audit Services

Business logic for one audit run. Each stage consumes the full output of the
previous one and is a plain function over pydantic models, so every stage can
be tested with a stub data source.

Services:
- date_range: reporting window resolution
- conversion_actions: enabled conversion action collection
- aggregation: per-action metric slices and run summaries
- classification: issue and opportunity rules
- action_plan: prioritized campaign recommendations
- report: HTML report rendering
"""

# =============================================================================
# Window Resolution
# =============================================================================

from conversion_audit.services.date_range import (
    resolve_baseline_window,
    resolve_reporting_windows,
    resolve_selected_window,
)

# =============================================================================
# Collection and Aggregation
# Conversion action skeletons enriched with device, trend, period, 30-day and
# campaign slices
# =============================================================================

from conversion_audit.services.conversion_actions import (
    collect_conversion_actions,
    parse_conversion_action,
)

from conversion_audit.services.aggregation import (
    WindowMetrics,
    aggregate_conversion_action,
    aggregate_conversion_actions,
    calculate_conversion_rate,
    calculate_cost_per_conversion,
    compute_window_metrics,
    fold_window_metrics,
)

# =============================================================================
# Classification and Action Plan
# =============================================================================

from conversion_audit.services.classification import (
    classify_conversion_action,
    classify_conversion_actions,
)

from conversion_audit.services.action_plan import (
    build_action_plan,
    determine_primary_conversions,
)

# =============================================================================
# Report Rendering
# =============================================================================

from conversion_audit.services.report import (
    build_error_body,
    build_report_subject,
    render_conversion_report,
)

__all__ = [
    'resolve_baseline_window',
    'resolve_reporting_windows',
    'resolve_selected_window',
    'collect_conversion_actions',
    'parse_conversion_action',
    'WindowMetrics',
    'aggregate_conversion_action',
    'aggregate_conversion_actions',
    'calculate_conversion_rate',
    'calculate_cost_per_conversion',
    'compute_window_metrics',
    'fold_window_metrics',
    'classify_conversion_action',
    'classify_conversion_actions',
    'build_action_plan',
    'determine_primary_conversions',
    'build_error_body',
    'build_report_subject',
    'render_conversion_report',
]
