"""
Settings and environment management module for the conversion audit job.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.
Settings are grouped the same way the audit is configured: e-mail delivery,
audit period, goals, Google Ads credentials and the SMTP transport. Nested
groups are addressed with a double underscore (e.g. EMAIL__RECIPIENT).

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for a rolling 30-day audit
- Singleton pattern via @lru_cache for efficient access
- Explicit START_DATE/END_DATE parsed as ISO dates (YYYY-MM-DD)

Recognized Options:
- EMAIL__ENABLED: Gates whether the report e-mail is sent (default: true)
- EMAIL__RECIPIENT: Report recipient address
- EMAIL__SUBJECT_PREFIX: Subject prefix (default: "Conversion Audit Report")
- AUDIT_PERIOD__DAYS: Rolling window length in days (default: 30)
- AUDIT_PERIOD__START_DATE / AUDIT_PERIOD__END_DATE: Explicit inclusive range
- GOALS__PRIMARY_CONVERSION: Optional single primary conversion override
- GOOGLE_ADS__*: API credentials for the reporting data source
- SMTP__*: Mail transport settings

Usage:
    from conversion_audit.core.config import get_settings

    settings = get_settings()
    recipient = settings.email.recipient
    days = settings.audit_period.days
"""

from datetime import date
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Length of the fixed baseline window, independent of the configured period
BASELINE_WINDOW_DAYS = 30


class EmailSettings(BaseModel):
    """
    Report delivery options.

    Attributes:
        enabled: Whether the HTML report is sent at the end of a successful run.
        recipient: Address receiving both the report and error notifications.
        subject_prefix: Prefix of the report subject line; the run date is appended.
    """
    enabled: bool = True
    recipient: str = ""
    subject_prefix: str = "Conversion Audit Report"


class AuditPeriodSettings(BaseModel):
    """
    Selected reporting period.

    When both start_date and end_date are set they define the exact inclusive
    range; otherwise the window is the last `days` days ending today.
    """
    days: int = Field(default=30, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class GoalsSettings(BaseModel):
    """Goal configuration used by the action plan."""
    # When set, only this conversion action is treated as primary
    primary_conversion: Optional[str] = None


class GoogleAdsSettings(BaseModel):
    """
    Google Ads API credentials.

    The refresh token is exchanged for an access token through google-auth;
    the developer token and (optional) login customer id are sent as headers.
    """
    developer_token: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    customer_id: Optional[str] = None
    login_customer_id: Optional[str] = None
    api_version: str = "v19"
    timeout_seconds: float = 60.0

    def missing_credentials(self) -> List[str]:
        """Return the names of required credentials that are not configured."""
        required = {
            'developer_token': self.developer_token,
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'refresh_token': self.refresh_token,
            'customer_id': self.customer_id,
        }
        return [name for name, value in required.items() if not value]


class SmtpSettings(BaseModel):
    """SMTP transport used by the e-mail notifier."""
    host: Optional[str] = None
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    # Defaults to the SMTP user when not set
    sender: Optional[str] = None
    use_tls: bool = True
    timeout_seconds: float = 30.0


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The class inherits from pydantic-settings BaseSettings which provides:
    - Automatic loading from environment variables (case-insensitive)
    - Support for .env file loading
    - Nested groups through the '__' delimiter
    - Type validation and coercion (dates, booleans, integers)

    Attributes:
        email: Report delivery options (EMAIL__*).
        audit_period: Selected reporting period (AUDIT_PERIOD__*).
        goals: Primary conversion override (GOALS__*).
        google_ads: Reporting API credentials (GOOGLE_ADS__*).
        smtp: Mail transport (SMTP__*).
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_nested_delimiter='__',
        extra='ignore',
        case_sensitive=False,
    )

    email: EmailSettings = Field(default_factory=EmailSettings)
    audit_period: AuditPeriodSettings = Field(default_factory=AuditPeriodSettings)
    goals: GoalsSettings = Field(default_factory=GoalsSettings)
    google_ads: GoogleAdsSettings = Field(default_factory=GoogleAdsSettings)
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The cached settings instance.

    Raises:
        pydantic.ValidationError: If a value cannot be coerced
            (e.g. AUDIT_PERIOD__START_DATE is not an ISO date).

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
