"""
Issue Classification Test Module

Covers each audit rule at and around its threshold, rule ordering within and
across actions, and the summary list views.

Rules under test:
- no_value (medium) when no default value is set
- no_conversions (high) when the 30-day window has zero conversions
- low_conversion_rate (high) when rate < 1% and clicks > 100
- device_optimization (medium opportunity) when >= 2 devices converted and
  max/min > 3
- declining_trend (high) when last week < 70% of the previous week
"""

import pytest

from conversion_audit.models.enums import IssueType, Severity
from conversion_audit.models.schemas import (
    AuditResult,
    ConversionAction,
    ConversionTrends,
    DeviceStats,
)
from conversion_audit.services.classification import (
    LOW_CONVERSION_RATE_MIN_CLICKS,
    classify_conversion_action,
    classify_conversion_actions,
    device_spread_ratio,
    has_declining_trend,
)


def make_action(name='Purchase', **overrides) -> ConversionAction:
    """Healthy action by default: valued, converting, good rate, flat trend."""
    fields = dict(
        id='1',
        name=name,
        defaultValue=10.0,
        hasValue=True,
        conversions=50,
        clicks=1000,
        conversionRate=5.0,
    )
    fields.update(overrides)
    return ConversionAction(**fields)


def with_devices(action: ConversionAction, **devices) -> ConversionAction:
    for device, conversions in devices.items():
        action.devicePerformance[device] = DeviceStats(conversions=conversions)
    return action


# =============================================================================
# Test Class: TestConfigurationRules
# =============================================================================

class TestConfigurationRules:

    def test_healthy_action_has_no_findings(self):
        result = AuditResult()
        action = make_action()

        classify_conversion_action(action, result)

        assert result.total == 1
        assert result.issues == []
        assert result.opportunities == []
        assert result.summary.activeConversions == [action]

    def test_no_value_issue(self):
        result = AuditResult()
        action = make_action(defaultValue=0.0, hasValue=False)

        classify_conversion_action(action, result)

        assert [(i.type, i.severity, i.message) for i in result.issues] == [
            (IssueType.NO_VALUE, Severity.MEDIUM, "No conversion value set"),
        ]
        assert result.summary.noValueSet == [action]

    def test_no_conversions_issue(self):
        result = AuditResult()
        action = make_action(conversions=0, clicks=50, conversionRate=0.0)

        classify_conversion_action(action, result)

        assert [(i.type, i.severity, i.message) for i in result.issues] == [
            (IssueType.NO_CONVERSIONS, Severity.HIGH, "No conversions in last 30 days"),
        ]
        assert result.summary.noConversions30Days == [action]


class TestLowConversionRate:

    def test_low_rate_with_enough_clicks(self):
        result = AuditResult()
        action = make_action(conversions=2, clicks=400, conversionRate=0.5)

        classify_conversion_action(action, result)

        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.type == IssueType.LOW_CONVERSION_RATE
        assert issue.severity == Severity.HIGH
        assert issue.message == "Low conversion rate (0.50%)"
        assert result.summary.lowConvRate == [action]

    @pytest.mark.parametrize("rate, clicks", [
        (0.5, 100),    # clicks must exceed 100
        (1.0, 500),    # rate must be strictly below 1%
        (0.99, 50),
    ])
    def test_not_flagged_outside_thresholds(self, rate, clicks):
        result = AuditResult()
        classify_conversion_action(make_action(conversionRate=rate, clicks=clicks), result)
        assert result.issues == []

    def test_rate_just_below_threshold(self):
        result = AuditResult()
        classify_conversion_action(make_action(conversionRate=0.999, clicks=101), result)
        assert result.issues[0].message == "Low conversion rate (1.00%)"

    def test_click_floor_is_a_whole_click_count(self):
        assert isinstance(LOW_CONVERSION_RATE_MIN_CLICKS, int)
        assert LOW_CONVERSION_RATE_MIN_CLICKS == 100


# =============================================================================
# Test Class: TestDeviceSpread
# =============================================================================

class TestDeviceSpread:

    def test_ten_versus_two_is_an_opportunity(self):
        result = AuditResult()
        action = with_devices(make_action(), MOBILE=10, DESKTOP=2)

        classify_conversion_action(action, result)

        assert result.issues == []
        assert len(result.opportunities) == 1
        opportunity = result.opportunities[0]
        assert opportunity.type == IssueType.DEVICE_OPTIMIZATION
        assert opportunity.severity == Severity.MEDIUM
        assert opportunity.message == "Large performance difference between devices"

    def test_ten_versus_four_is_not(self):
        result = AuditResult()
        classify_conversion_action(with_devices(make_action(), MOBILE=10, DESKTOP=4), result)
        assert result.opportunities == []

    def test_ratio_of_exactly_three_is_not(self):
        result = AuditResult()
        classify_conversion_action(with_devices(make_action(), MOBILE=9, TABLET=3), result)
        assert result.opportunities == []

    def test_single_converting_device_is_never_compared(self):
        action = with_devices(make_action(), MOBILE=500)
        assert device_spread_ratio(action) is None

        result = AuditResult()
        classify_conversion_action(action, result)
        assert result.opportunities == []

    def test_zero_devices_are_excluded_from_ratio(self):
        action = with_devices(make_action(), MOBILE=12, DESKTOP=3, TABLET=0)
        assert device_spread_ratio(action) == pytest.approx(4.0)


# =============================================================================
# Test Class: TestDecliningTrend
# =============================================================================

class TestDecliningTrend:

    def test_drop_below_seventy_percent_fires(self):
        assert has_declining_trend([100, 60]) is True

    def test_drop_to_seventy_one_percent_does_not(self):
        assert has_declining_trend([100, 71]) is False

    def test_exactly_seventy_percent_does_not(self):
        assert has_declining_trend([100, 70]) is False

    def test_only_last_two_weeks_count(self):
        assert has_declining_trend([10, 100, 60]) is True
        assert has_declining_trend([100, 10, 9]) is False

    @pytest.mark.parametrize("series", [[], [5]])
    def test_short_series_never_fires(self, series):
        assert has_declining_trend(series) is False

    def test_declining_trend_issue(self):
        result = AuditResult()
        action = make_action(trends=ConversionTrends(weeklyConversions=[100, 60], weeklyValue=[0, 0]))

        classify_conversion_action(action, result)

        assert [(i.type, i.severity, i.message) for i in result.issues] == [
            (IssueType.DECLINING_TREND, Severity.HIGH, "Significant decrease in conversions last week"),
        ]


# =============================================================================
# Test Class: TestRuleOrdering
# =============================================================================

class TestRuleOrdering:

    def test_unvalued_unconverting_action_with_clicks(self):
        """No value, zero conversions and 500 account clicks: three issues, in rule order."""
        result = AuditResult()
        action = make_action(
            defaultValue=0.0, hasValue=False, conversions=0, clicks=500, conversionRate=0.0
        )

        classify_conversion_action(action, result)

        assert [issue.type for issue in result.issues] == [
            IssueType.NO_VALUE,
            IssueType.NO_CONVERSIONS,
            IssueType.LOW_CONVERSION_RATE,
        ]
        assert result.summary.noValueSet == [action]
        assert result.summary.noConversions30Days == [action]
        assert result.summary.lowConvRate == [action]
        assert result.total == 1

    def test_findings_follow_action_order(self):
        actions = [
            make_action('Signup', hasValue=False),
            with_devices(make_action('Purchase'), MOBILE=10, DESKTOP=2),
            make_action('Call', conversions=0, conversionRate=0.0, clicks=10),
        ]

        result = classify_conversion_actions(actions)

        assert result.total == 3
        assert [(i.conversion, i.type) for i in result.issues] == [
            ('Signup', IssueType.NO_VALUE),
            ('Call', IssueType.NO_CONVERSIONS),
        ]
        assert [o.conversion for o in result.opportunities] == ['Purchase']
        assert [a.name for a in result.summary.activeConversions] == ['Signup', 'Purchase', 'Call']

    def test_list_views_share_action_objects(self):
        action = make_action(hasValue=False)
        result = classify_conversion_actions([action])
        assert result.summary.noValueSet[0] is result.summary.activeConversions[0]

    def test_existing_result_is_extended(self):
        result = AuditResult()
        classify_conversion_actions([make_action('A')], result)
        classify_conversion_actions([make_action('B')], result)
        assert result.total == 2
