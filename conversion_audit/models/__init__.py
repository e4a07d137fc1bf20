"""
Package initialization file for conversion audit models.

Re-exports all enumerations and pydantic schemas so other modules can import
them from conversion_audit.models directly.

Usage:
    from conversion_audit.models import (
        AuditResult,
        ConversionAction,
        Device,
        IssueType,
    )
"""

from conversion_audit.models.enums import (
    ActionItemType,
    Device,
    IssueType,
    Priority,
    Severity,
)
from conversion_audit.models.schemas import (
    ActionItem,
    ActionPlan,
    AuditIssue,
    AuditResult,
    AuditSummary,
    CampaignConversionStats,
    CampaignPerformance,
    ConversionAction,
    ConversionTrends,
    DateRange,
    DeviceStats,
    ReportingWindows,
    empty_device_performance,
)

__all__ = [
    # Enums
    'ActionItemType',
    'Device',
    'IssueType',
    'Priority',
    'Severity',
    # Reporting windows
    'DateRange',
    'ReportingWindows',
    # Conversion actions
    'ConversionAction',
    'ConversionTrends',
    'DeviceStats',
    'empty_device_performance',
    # Audit result
    'AuditIssue',
    'AuditResult',
    'AuditSummary',
    'CampaignConversionStats',
    'CampaignPerformance',
    # Action plan
    'ActionItem',
    'ActionPlan',
]
