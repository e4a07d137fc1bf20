"""
Core infrastructure package for the conversion audit.

Provides:
- Configuration management via pydantic-settings
- The reporting data source (Google Ads GAQL over REST)
- Shared field extraction for query rows

Components Re-exported:
    Settings: Pydantic settings class with all configuration groups
    get_settings: Function returning the cached Settings singleton
    DataSource: Protocol for anything that executes a query and returns rows
    DataSourceError: Raised when a query fails
    GoogleAdsDataSource: Google Ads implementation of DataSource
    get_number / get_flag / get_text: Field extraction helpers
"""

from conversion_audit.core.config import Settings, get_settings
from conversion_audit.core.data_source import (
    DataSource,
    DataSourceError,
    GoogleAdsDataSource,
    flatten_row,
    get_flag,
    get_number,
    get_text,
)

__all__ = [
    'Settings',
    'get_settings',
    'DataSource',
    'DataSourceError',
    'GoogleAdsDataSource',
    'flatten_row',
    'get_flag',
    'get_number',
    'get_text',
]
