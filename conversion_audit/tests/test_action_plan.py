"""
Tests for action plan derivation.

Covers primary conversion selection, each recommendation rule, item order and
the all-clear marker.
"""

from conversion_audit.models.enums import ActionItemType, Priority
from conversion_audit.models.schemas import (
    AuditResult,
    CampaignConversionStats,
    CampaignPerformance,
    ConversionAction,
)
from conversion_audit.services.action_plan import (
    build_action_plan,
    determine_primary_conversions,
)


def make_result(campaigns=None, actions=None) -> AuditResult:
    result = AuditResult()
    for action in actions or []:
        result.summary.activeConversions.append(action)
    for name, contributions in (campaigns or {}).items():
        campaign = CampaignPerformance()
        for action_name, (conversions, value) in contributions.items():
            campaign.conversions += conversions
            campaign.value += value
            campaign.conversionActions[action_name] = CampaignConversionStats(
                conversions=conversions, value=value
            )
        result.summary.campaignPerformance[name] = campaign
    return result


def primary(name) -> ConversionAction:
    return ConversionAction(id=name, name=name, isPrimary=True)


def secondary(name) -> ConversionAction:
    return ConversionAction(id=name, name=name, isPrimary=False)


class TestPrimaryConversions:

    def test_override_wins(self):
        result = make_result(actions=[primary('Purchase')])
        assert determine_primary_conversions(result, 'Lead Form') == ['Lead Form']

    def test_flagged_actions_in_fetch_order(self):
        result = make_result(actions=[primary('Signup'), secondary('Call'), primary('Purchase')])
        assert determine_primary_conversions(result) == ['Signup', 'Purchase']

    def test_none_flagged(self):
        assert determine_primary_conversions(make_result(actions=[secondary('Call')])) == []


class TestActionPlanRules:

    def test_no_primary_goals_is_single_high_item(self):
        result = make_result(actions=[secondary('Call')])

        plan = build_action_plan(result)

        assert len(plan.items) == 1
        item = plan.items[0]
        assert item.priority == Priority.HIGH
        assert item.type == ActionItemType.NO_PRIMARY_GOALS
        assert item.action == "Set up primary conversion goals"
        assert item.affected == ["No primary conversion actions defined"]

    def test_campaigns_with_no_conversions(self):
        result = make_result(
            actions=[primary('Purchase')],
            campaigns={
                'Brand': {'Purchase': (5, 100.0)},
                'Generic': {'Purchase': (5, 100.0)},
                'Display': {'Purchase': (0, 0.0)},
                'Video': {},
            },
        )

        plan = build_action_plan(result)
        item = next(i for i in plan.items if i.type == ActionItemType.NO_CONVERSIONS)

        assert item.priority == Priority.HIGH
        assert item.action == "Review 2 campaign(s) with no conversions"
        assert item.affected == ['Display', 'Video']

    def test_campaigns_missing_primary_conversion(self):
        result = make_result(
            actions=[primary('Purchase'), secondary('Call')],
            campaigns={
                'Brand': {'Purchase': (5, 100.0), 'Call': (1, 10.0)},
                'Generic': {'Call': (4, 40.0)},
                'Remarketing': {'Purchase': (0, 0.0), 'Call': (5, 50.0)},
            },
        )

        plan = build_action_plan(result)

        assert len(plan.items) == 1
        item = plan.items[0]
        assert item.priority == Priority.MEDIUM
        assert item.type == ActionItemType.MISSING_PRIMARY_CONVERSION
        assert item.action == "Review 2 campaign(s) without Purchase"
        assert item.tip == "Check why these campaigns aren't generating this primary conversion type"
        assert item.affected == ['Generic', 'Remarketing']

    def test_one_missing_primary_item_per_primary(self):
        result = make_result(
            campaigns={'Brand': {'Call': (3, 30.0)}, 'Generic': {'Call': (3, 30.0)}},
        )

        plan = build_action_plan(result, primary_conversion='Purchase')

        assert plan.primaryConversions == ['Purchase']
        assert [i.action for i in plan.items] == ["Review 2 campaign(s) without Purchase"]

    def test_converting_campaigns_without_value(self):
        result = make_result(
            actions=[primary('Lead')],
            campaigns={
                'Brand': {'Lead': (5, 0.0)},
                'Generic': {'Lead': (5, 50.0)},
            },
        )

        plan = build_action_plan(result)

        assert len(plan.items) == 1
        item = plan.items[0]
        assert item.type == ActionItemType.MISSING_VALUES
        assert item.action == "Set conversion values for 1 converting campaign(s)"
        assert item.affected == ['Brand']

    def test_dominant_campaign(self):
        result = make_result(
            actions=[primary('Purchase')],
            campaigns={
                'Brand': {'Purchase': (85, 850.0)},
                'Generic': {'Purchase': (15, 150.0)},
            },
        )

        plan = build_action_plan(result)

        assert len(plan.items) == 1
        item = plan.items[0]
        assert item.type == ActionItemType.CAMPAIGN_DISTRIBUTION
        assert item.action == "Review budget allocation across campaigns"
        assert item.affected == ['Brand (Dominant conversion source)']

    def test_exactly_eighty_percent_is_not_dominant(self):
        result = make_result(
            actions=[primary('Purchase')],
            campaigns={
                'Brand': {'Purchase': (80, 800.0)},
                'Generic': {'Purchase': (20, 200.0)},
            },
        )
        assert build_action_plan(result).allClear

    def test_zero_total_conversions_skips_distribution(self):
        result = make_result(
            actions=[primary('Purchase')],
            campaigns={'Brand': {'Purchase': (0, 0.0)}},
        )

        plan = build_action_plan(result)

        assert ActionItemType.CAMPAIGN_DISTRIBUTION not in [i.type for i in plan.items]


class TestActionPlanShape:

    def test_all_clear(self):
        result = make_result(
            actions=[primary('Purchase')],
            campaigns={
                'Brand': {'Purchase': (50, 500.0)},
                'Generic': {'Purchase': (50, 500.0)},
            },
        )

        plan = build_action_plan(result)

        assert plan.items == []
        assert plan.allClear is True

    def test_no_campaigns_with_primary_is_all_clear(self):
        assert build_action_plan(make_result(actions=[primary('Purchase')])).allClear

    def test_item_order(self):
        result = make_result(
            campaigns={
                'Brand': {'Call': (90, 0.0)},
                'Display': {'Call': (0, 0.0)},
                'Generic': {'Call': (5, 5.0)},
            },
        )

        plan = build_action_plan(result)

        assert [(i.priority, i.type) for i in plan.items] == [
            (Priority.HIGH, ActionItemType.NO_PRIMARY_GOALS),
            (Priority.HIGH, ActionItemType.NO_CONVERSIONS),
            (Priority.MEDIUM, ActionItemType.MISSING_VALUES),
            (Priority.MEDIUM, ActionItemType.CAMPAIGN_DISTRIBUTION),
        ]
        assert [i.type for i in plan.by_priority(Priority.MEDIUM)] == [
            ActionItemType.MISSING_VALUES,
            ActionItemType.CAMPAIGN_DISTRIBUTION,
        ]
