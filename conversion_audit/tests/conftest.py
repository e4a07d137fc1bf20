"""
Pytest Configuration and Shared Fixtures for Conversion Audit Tests.

This module provides:
- StubDataSource: an in-memory DataSource answering exact GAQL query text,
  built with the same query builders the services use
- Row builders for conversion action, device, trend, totals and campaign rows
- A settings factory that ignores the process environment and .env
- A fixed execution date so windows and report subjects are stable
- Mock notifier fixture replacing SMTP delivery

Dependencies:
- pytest
- unittest.mock
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple
from unittest.mock import Mock

import pytest

from conversion_audit.core.config import (
    AuditPeriodSettings,
    EmailSettings,
    GoalsSettings,
    Settings,
    SmtpSettings,
)
from conversion_audit.jobs.email_notifier import EmailNotifier
from conversion_audit.models.schemas import DateRange, ReportingWindows
from conversion_audit.queries.gaql_queries import (
    get_account_click_cost_query,
    get_campaign_breakdown_query,
    get_conversion_actions_query,
    get_conversion_totals_query,
    get_device_breakdown_query,
    get_weekly_trend_query,
)
from conversion_audit.services.date_range import resolve_reporting_windows


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - scenario: end-to-end runs over a stubbed account
    - determinism: repeated runs must produce identical output
    """
    config.addinivalue_line(
        'markers',
        'scenario: marks end-to-end audit runs over a stubbed account'
    )
    config.addinivalue_line(
        'markers',
        'determinism: marks tests comparing repeated runs byte for byte'
    )


# ============================================================
# STUB DATA SOURCE
# ============================================================

Row = Dict[str, Any]


class StubDataSource:
    """
    In-memory DataSource keyed by exact query text.

    Unknown queries return no rows. Queries registered with fail() raise.
    Every executed query is recorded in `calls`.
    """

    def __init__(self):
        self.responses: Dict[str, List[Row]] = {}
        self.failures: Dict[str, Exception] = {}
        self.calls: List[str] = []

    def add(self, query_text: str, rows: List[Row]) -> "StubDataSource":
        self.responses[query_text] = rows
        return self

    def fail(self, query_text: str, error: Optional[Exception] = None) -> "StubDataSource":
        self.failures[query_text] = error or RuntimeError("stubbed query failure")
        return self

    def query(self, query_text: str) -> List[Row]:
        self.calls.append(query_text)
        if query_text in self.failures:
            raise self.failures[query_text]
        return [dict(row) for row in self.responses.get(query_text, [])]

    # --------------------------------------------------------
    # Scenario helpers
    # --------------------------------------------------------

    def with_actions(self, *rows: Row) -> "StubDataSource":
        return self.add(get_conversion_actions_query(), list(rows))

    def with_click_cost(self, window: DateRange, clicks: float, cost: float) -> "StubDataSource":
        """Account-wide clicks and cost (in currency units) for a window."""
        return self.add(get_account_click_cost_query(window), [
            {'metrics.clicks': str(int(clicks)), 'metrics.cost_micros': str(int(cost * 1_000_000))},
        ])

    def with_totals(
        self,
        name: str,
        window: DateRange,
        conversions: float,
        value: float = 0.0
    ) -> "StubDataSource":
        return self.add(get_conversion_totals_query(name, window), [
            {
                'segments.conversion_action_name': name,
                'metrics.all_conversions': conversions,
                'metrics.all_conversions_value': value,
            },
        ])

    def with_devices(
        self,
        name: str,
        window: DateRange,
        devices: Dict[str, Tuple[float, float]]
    ) -> "StubDataSource":
        return self.add(get_device_breakdown_query(name, window), [
            {
                'segments.conversion_action_name': name,
                'segments.device': device,
                'metrics.all_conversions': conversions,
                'metrics.all_conversions_value': value,
            }
            for device, (conversions, value) in devices.items()
        ])

    def with_weeks(
        self,
        name: str,
        window: DateRange,
        weekly: Iterable[Tuple[float, float]]
    ) -> "StubDataSource":
        return self.add(get_weekly_trend_query(name, window), [
            {
                'segments.conversion_action_name': name,
                'segments.week': f"2026-09-{7 * index + 7:02d}",
                'metrics.all_conversions': conversions,
                'metrics.all_conversions_value': value,
            }
            for index, (conversions, value) in enumerate(weekly)
        ])

    def with_campaigns(
        self,
        name: str,
        window: DateRange,
        campaigns: Iterable[Tuple[str, float, float]]
    ) -> "StubDataSource":
        return self.add(get_campaign_breakdown_query(name, window), [
            {
                'campaign.name': campaign,
                'segments.conversion_action_name': name,
                'metrics.all_conversions': conversions,
                'metrics.all_conversions_value': value,
            }
            for campaign, conversions, value in campaigns
        ])


def conversion_action_row(
    action_id: str,
    name: str,
    default_value: Any = 0,
    primary: Any = False,
    category: str = 'PURCHASE',
    attribution_model: str = 'GOOGLE_ADS_LAST_CLICK',
) -> Row:
    """Row as returned by the conversion action list query."""
    return {
        'conversion_action.id': action_id,
        'conversion_action.name': name,
        'conversion_action.category': category,
        'conversion_action.status': 'ENABLED',
        'conversion_action.primary_for_goal': str(primary).lower() if isinstance(primary, bool) else primary,
        'conversion_action.include_in_conversions_metric': 'true',
        'conversion_action.counting_type': 'ONE_PER_CLICK',
        'conversion_action.value_settings.default_value': default_value,
        'conversion_action.attribution_model_settings.attribution_model': attribution_model,
        'conversion_action.type': 'WEBPAGE',
    }


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def today() -> date:
    """Fixed execution date."""
    return date(2026, 10, 19)


@pytest.fixture
def windows(today: date) -> ReportingWindows:
    """Default configuration: the selected period equals the 30-day baseline."""
    return resolve_reporting_windows(AuditPeriodSettings(days=30), today)


@pytest.fixture
def weekly_windows(today: date) -> ReportingWindows:
    """7-day selected period, distinct from the 30-day baseline."""
    return resolve_reporting_windows(AuditPeriodSettings(days=7), today)


@pytest.fixture
def stub_source() -> StubDataSource:
    return StubDataSource()


@pytest.fixture
def make_settings():
    """
    Factory building Settings without reading the environment or .env.

    Usage:
        settings = make_settings(days=7, email_enabled=False)
    """
    def _make(
        days: int = 30,
        email_enabled: bool = True,
        recipient: str = 'ads-team@example.com',
        primary_conversion: Optional[str] = None,
    ) -> Settings:
        return Settings(
            _env_file=None,
            email=EmailSettings(enabled=email_enabled, recipient=recipient),
            audit_period=AuditPeriodSettings(days=days),
            goals=GoalsSettings(primary_conversion=primary_conversion),
            smtp=SmtpSettings(host='smtp.example.com', user='audit@example.com', password='secret'),
        )
    return _make


@pytest.fixture
def mock_notifier() -> Mock:
    """EmailNotifier stand-in whose send() reports success."""
    notifier = Mock(spec=EmailNotifier)
    notifier.send.return_value = True
    return notifier
