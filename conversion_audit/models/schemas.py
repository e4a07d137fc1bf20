"""
Pydantic models for the conversion audit.

This module defines the data that flows through one audit run: the reporting
windows, the enriched conversion actions, the audit result with its running
summaries, and the derived action plan.

Field names are camelCase to match the report vocabulary
(periodConversions, costPerConversion, ...). All models use Pydantic v2 syntax.
"""

from datetime import date
from typing import Dict, List

from pydantic import BaseModel, Field

from conversion_audit.models.enums import (
    ActionItemType,
    Device,
    IssueType,
    Priority,
    Severity,
)


# =============================================================================
# Reporting Windows
# =============================================================================


class DateRange(BaseModel):
    """
    Inclusive date range used to parameterize queries.

    Example:
        >>> DateRange(start=date(2026, 9, 19), end=date(2026, 10, 19)).predicate
        "segments.date BETWEEN '2026-09-19' AND '2026-10-19'"
    """
    start: date
    end: date

    @property
    def predicate(self) -> str:
        """GAQL filter clause selecting this range."""
        return f"segments.date BETWEEN '{self.start.isoformat()}' AND '{self.end.isoformat()}'"


class ReportingWindows(BaseModel):
    """
    The two windows of one run.

    Attributes:
        selected: The configured reporting period.
        baseline: The fixed trailing-30-day window, independent of the configuration.
    """
    selected: DateRange
    baseline: DateRange

    @property
    def differs(self) -> bool:
        """Whether the selected period is distinct from the 30-day baseline."""
        return self.selected != self.baseline


# =============================================================================
# Conversion Actions
# =============================================================================


class DeviceStats(BaseModel):
    """Conversions and value for one device category."""
    conversions: float = Field(default=0.0, ge=0.0)
    value: float = Field(default=0.0, ge=0.0)


def empty_device_performance() -> Dict[str, DeviceStats]:
    """Zeroed device mapping in MOBILE, DESKTOP, TABLET order."""
    return {device.value: DeviceStats() for device in Device}


class ConversionTrends(BaseModel):
    """Weekly series over the selected period, aligned by week index."""
    weeklyConversions: List[float] = Field(default_factory=list)
    weeklyValue: List[float] = Field(default_factory=list)


class ConversionAction(BaseModel):
    """
    One enabled conversion action with its configuration and metrics.

    Two structurally identical metric sets are held: the fixed 30-day window
    (conversions, value, clicks, conversionRate, costPerConversion) and the
    selected period (the same names prefixed with 'period'). Clicks are
    account-wide totals for the window, not attributable to the action.
    """
    id: str
    name: str = Field(..., description="Unique within a run; opaque join key")
    status: str = "ENABLED"
    category: str = ""
    countingType: str = ""
    defaultValue: float = Field(default=0.0, ge=0.0)
    hasValue: bool = False
    includeInConversions: bool = False
    isPrimary: bool = False
    attributionModel: str = ""
    type: str = ""

    # Fixed 30-day window
    conversions: float = 0.0
    value: float = 0.0
    clicks: float = 0.0
    conversionRate: float = 0.0
    costPerConversion: float = 0.0

    # Selected period
    periodConversions: float = 0.0
    periodValue: float = 0.0
    periodClicks: float = 0.0
    periodConversionRate: float = 0.0
    periodCostPerConversion: float = 0.0

    devicePerformance: Dict[str, DeviceStats] = Field(default_factory=empty_device_performance)
    trends: ConversionTrends = Field(default_factory=ConversionTrends)


# =============================================================================
# Audit Result
# =============================================================================


class AuditIssue(BaseModel):
    """A detected problem (issue) or optimization suggestion (opportunity)."""
    type: IssueType
    severity: Severity
    conversion: str = Field(..., description="Name of the conversion action")
    message: str


class CampaignConversionStats(BaseModel):
    """One conversion action's contribution to a campaign."""
    conversions: float = 0.0
    value: float = 0.0


class CampaignPerformance(BaseModel):
    """
    Selected-period totals for one campaign.

    conversionActions maps conversion action name to its contribution; the
    campaign totals are the sum of the contributions folded in.
    """
    conversions: float = 0.0
    value: float = 0.0
    conversionActions: Dict[str, CampaignConversionStats] = Field(default_factory=dict)


class AuditSummary(BaseModel):
    """
    Running summaries of one run.

    The list views hold the same ConversionAction objects as activeConversions.
    devicePerformance and campaignPerformance are accumulated as each action's
    slices are folded in and are never reset mid-run.
    """
    activeConversions: List[ConversionAction] = Field(default_factory=list)
    noValueSet: List[ConversionAction] = Field(default_factory=list)
    noConversions30Days: List[ConversionAction] = Field(default_factory=list)
    lowConvRate: List[ConversionAction] = Field(default_factory=list)
    devicePerformance: Dict[str, DeviceStats] = Field(default_factory=empty_device_performance)
    campaignPerformance: Dict[str, CampaignPerformance] = Field(default_factory=dict)


class AuditResult(BaseModel):
    """Complete outcome of the aggregation and classification stages."""
    total: int = 0
    issues: List[AuditIssue] = Field(default_factory=list)
    opportunities: List[AuditIssue] = Field(default_factory=list)
    summary: AuditSummary = Field(default_factory=AuditSummary)


# =============================================================================
# Action Plan
# =============================================================================


class ActionItem(BaseModel):
    """One prioritized recommendation."""
    priority: Priority
    type: ActionItemType
    action: str
    tip: str
    affected: List[str] = Field(default_factory=list)


class ActionPlan(BaseModel):
    """
    Ordered recommendations derived from an AuditResult.

    An empty item list is the success marker: nothing needs attention.
    """
    primaryConversions: List[str] = Field(default_factory=list)
    items: List[ActionItem] = Field(default_factory=list)

    @property
    def allClear(self) -> bool:
        return not self.items

    def by_priority(self, priority: Priority) -> List[ActionItem]:
        """Items of one priority, in plan order."""
        return [item for item in self.items if item.priority == priority]
