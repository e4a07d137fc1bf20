"""
Google Ads reporting data source for the conversion audit.

This module is the single data access layer of the audit. Every query flows
through a DataSource, which executes a GAQL query and returns rows as flat
mappings from fully-qualified field name (e.g. "metrics.clicks") to value.

Key Components:
- DataSource: Protocol implemented by the Google Ads client and by test stubs
- GoogleAdsDataSource: GAQL searchStream over REST, authenticated with google-auth
- flatten_row(): Converts nested camelCase API results into dotted snake_case keys
- get_number() / get_flag() / get_text(): Tolerant field extraction shared by
  every consumer of query rows

Field Extraction Rules:
- Absent, empty or non-numeric numeric fields read as 0.0
- Boolean-ish fields are true only when their string form equals "true"
  (case-insensitive)

Usage:
    source = GoogleAdsDataSource.from_settings(get_settings().google_ads)
    rows = source.query("SELECT metrics.clicks FROM campaign")
    clicks = sum(get_number(row, 'metrics.clicks') for row in rows)
"""

import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Protocol

from google.auth.transport.requests import AuthorizedSession
from google.oauth2.credentials import Credentials

from conversion_audit.core.config import GoogleAdsSettings


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

GOOGLE_ADS_SCOPES = ['https://www.googleapis.com/auth/adwords']
GOOGLE_OAUTH_TOKEN_URI = 'https://oauth2.googleapis.com/token'
GOOGLE_ADS_BASE_URL = 'https://googleads.googleapis.com'

Row = Dict[str, Any]

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


class DataSourceError(Exception):
    """Raised when the reporting backend rejects or fails a query."""


class DataSource(Protocol):
    """Executes a reporting query and returns flat rows."""

    def query(self, query_text: str) -> List[Row]:
        ...


# =============================================================================
# Field Extraction
# =============================================================================

def get_number(row: Mapping[str, Any], field: str) -> float:
    """
    Read a numeric field from a query row.

    Args:
        row: Flat query row.
        field: Fully-qualified field name, e.g. 'metrics.all_conversions'.

    Returns:
        The value as float; 0.0 when the field is absent, empty, non-numeric
        or not finite.

    Example:
        >>> get_number({'metrics.clicks': '42'}, 'metrics.clicks')
        42.0
        >>> get_number({}, 'metrics.clicks')
        0.0
    """
    value = row.get(field)
    if value is None or value == '':
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def get_flag(row: Mapping[str, Any], field: str) -> bool:
    """Read a boolean-ish field: true only when it reads "true" in any case."""
    return str(row.get(field, '')).lower() == 'true'


def get_text(row: Mapping[str, Any], field: str, default: str = '') -> str:
    """Read a field as a string, falling back to `default` when absent."""
    value = row.get(field)
    return default if value is None else str(value)


# =============================================================================
# Row Flattening
# =============================================================================

def _to_snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub('_', key).lower()


def flatten_row(result: Mapping[str, Any], prefix: str = '') -> Row:
    """
    Flatten one nested API result into dotted snake_case field names.

    The REST API returns resources as nested camelCase JSON objects, e.g.
    {"metrics": {"allConversionsValue": 12.5}}; the audit addresses fields the
    way they are written in GAQL, e.g. "metrics.all_conversions_value".

    Args:
        result: One element of a searchStream batch's "results" list.
        prefix: Dotted path of the enclosing object (used for recursion).

    Returns:
        Flat row mapping field name to scalar value.
    """
    row: Row = {}
    for key, value in result.items():
        name = f"{prefix}{_to_snake_case(key)}"
        if isinstance(value, Mapping):
            row.update(flatten_row(value, prefix=f"{name}."))
        else:
            row[name] = value
    return row


# =============================================================================
# Google Ads Client
# =============================================================================

class GoogleAdsDataSource:
    """
    Read-only Google Ads reporting client.

    Executes GAQL through the googleAds:searchStream REST endpoint. OAuth
    access tokens are obtained from the configured refresh token and renewed
    transparently by google-auth's AuthorizedSession.

    Attributes:
        customer_id: Account being audited (dashes removed).
        login_customer_id: Manager account id, when access goes through an MCC.
    """

    def __init__(
        self,
        session: AuthorizedSession,
        customer_id: str,
        developer_token: str,
        login_customer_id: Optional[str] = None,
        api_version: str = 'v19',
        timeout_seconds: float = 60.0,
    ):
        self.session = session
        self.customer_id = customer_id.replace('-', '')
        self.developer_token = developer_token
        self.login_customer_id = login_customer_id.replace('-', '') if login_customer_id else None
        self.timeout_seconds = timeout_seconds
        self.url = (
            f"{GOOGLE_ADS_BASE_URL}/{api_version}/customers/"
            f"{self.customer_id}/googleAds:searchStream"
        )

    @classmethod
    def from_settings(cls, settings: GoogleAdsSettings) -> 'GoogleAdsDataSource':
        """
        Build a client from GOOGLE_ADS__* settings.

        Raises:
            DataSourceError: If required credentials are missing.
        """
        missing = settings.missing_credentials()
        if missing:
            raise DataSourceError(
                f"Missing Google Ads credentials: {', '.join(missing)}"
            )

        credentials = Credentials(
            token=None,
            refresh_token=settings.refresh_token,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            token_uri=GOOGLE_OAUTH_TOKEN_URI,
            scopes=GOOGLE_ADS_SCOPES,
        )
        return cls(
            session=AuthorizedSession(credentials),
            customer_id=settings.customer_id,
            developer_token=settings.developer_token,
            login_customer_id=settings.login_customer_id,
            api_version=settings.api_version,
            timeout_seconds=settings.timeout_seconds,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {
            'developer-token': self.developer_token,
            'Content-Type': 'application/json',
        }
        if self.login_customer_id:
            headers['login-customer-id'] = self.login_customer_id
        return headers

    def query(self, query_text: str) -> List[Row]:
        """
        Execute a GAQL query and return all rows, flattened.

        Args:
            query_text: GAQL query string.

        Returns:
            Rows in the order returned by the API.

        Raises:
            DataSourceError: On any non-200 response.
        """
        response = self.session.post(
            self.url,
            headers=self._headers(),
            json={'query': query_text},
            timeout=self.timeout_seconds,
        )
        if response.status_code != 200:
            try:
                body = response.json()
                # Stream errors arrive wrapped in a one-element array
                if isinstance(body, list):
                    body = body[0]
                message = body['error']['message']
            except (ValueError, KeyError, IndexError, TypeError):
                message = response.text
            raise DataSourceError(f"API error {response.status_code}: {message}")

        rows: List[Row] = []
        # searchStream answers with a JSON array of result batches
        for batch in response.json():
            for result in batch.get('results', []):
                rows.append(flatten_row(result))

        logger.debug(f"Query returned {len(rows)} rows")
        return rows
