"""Analytics query adapters - Search Console and GA4 Data API over httpx."""

import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .queries import SearchAnalyticsQuery, WebAnalyticsQuery
from ..utils.logger import get_app_logger


GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
SEARCH_CONSOLE_BASE_URL = "https://searchconsole.googleapis.com/webmasters/v3"
ANALYTICS_DATA_BASE_URL = "https://analyticsdata.googleapis.com/v1beta"

# Refresh this many seconds before Google's stated expiry
TOKEN_EXPIRY_MARGIN = 60


class AdapterError(Exception):
    """Base class for analytics adapter failures."""


class DataSourceNotConfigured(AdapterError):
    """The data source or its credentials are not set up."""


class UpstreamQueryError(AdapterError):
    """The analytics API rejected the query or could not be reached."""


class GoogleOAuthSession:
    """Holds a refreshable Google access token for the analytics APIs."""

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        refresh_token: Optional[str],
        http_client: httpx.AsyncClient
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.http_client = http_client
        self.logger = get_app_logger()
        self._access_token: Optional[str] = None
        self._expires_at: float = 0.0

    @classmethod
    def from_settings(cls, settings, http_client: httpx.AsyncClient) -> "GoogleOAuthSession":
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            refresh_token=settings.google_refresh_token,
            http_client=http_client
        )

    async def get_access_token(self) -> str:
        """
        Return a valid access token, refreshing it when needed.

        Raises:
            DataSourceNotConfigured: If no OAuth connection is configured
            UpstreamQueryError: If the token refresh fails
        """
        if not (self.client_id and self.client_secret and self.refresh_token):
            raise DataSourceNotConfigured("Google OAuth not connected. Configure the Google refresh token.")

        if self._access_token and time.monotonic() < self._expires_at:
            return self._access_token

        try:
            response = await self.http_client.post(GOOGLE_TOKEN_URL, data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": self.refresh_token,
                "grant_type": "refresh_token",
            })
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.error(f"Google token refresh failed: {e}")
            raise UpstreamQueryError(f"Google token refresh failed: {e}") from e

        payload = response.json()
        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 3600))
        self._expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        self.logger.debug("Refreshed Google access token")
        return self._access_token


class _GoogleApiAdapter:
    """Shared request plumbing for the Google analytics APIs."""

    api_name = "Google API"

    def __init__(self, oauth: GoogleOAuthSession, http_client: httpx.AsyncClient):
        self.oauth = oauth
        self.http_client = http_client
        self.logger = get_app_logger()

    async def _post(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        token = await self.oauth.get_access_token()
        try:
            response = await self.http_client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {token}"}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            self.logger.warning(f"{self.api_name} returned {e.response.status_code}: {detail}")
            raise UpstreamQueryError(f"{self.api_name} error {e.response.status_code}: {detail}") from e
        except httpx.HTTPError as e:
            self.logger.warning(f"{self.api_name} request failed: {e}")
            raise UpstreamQueryError(f"{self.api_name} request failed: {e}") from e
        return response.json()


def _error_detail(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text[:200] or response.reason_phrase


class SearchConsoleAdapter(_GoogleApiAdapter):
    """Search analytics query against Google Search Console."""

    api_name = "Search Console"

    async def query(self, site_url: Optional[str], query: SearchAnalyticsQuery) -> List[Dict[str, Any]]:
        """
        Run a search analytics query.

        Args:
            site_url: Search Console property of the client
            query: Validated tool input

        Returns:
            Rows as {keys, clicks, impressions, ctr, position}; ctr is a percentage

        Raises:
            DataSourceNotConfigured: If the client has no site configured
            UpstreamQueryError: If the API call fails
        """
        if not site_url:
            raise DataSourceNotConfigured("No Search Console site configured for this client.")

        url = f"{SEARCH_CONSOLE_BASE_URL}/sites/{quote(site_url, safe='')}/searchAnalytics/query"
        data = await self._post(url, {
            "startDate": query.start_date.isoformat(),
            "endDate": query.end_date.isoformat(),
            "dimensions": list(query.dimensions),
            "rowLimit": query.row_limit,
        })

        return [
            {
                "keys": row.get("keys", []),
                "clicks": row.get("clicks", 0),
                "impressions": row.get("impressions", 0),
                "ctr": round(row.get("ctr", 0) * 100, 2),
                "position": round(row.get("position", 0), 1),
            }
            for row in data.get("rows", [])
        ]


class AnalyticsDataAdapter(_GoogleApiAdapter):
    """Report query against the GA4 Data API."""

    api_name = "Google Analytics"

    async def query(self, property_id: Optional[str], query: WebAnalyticsQuery) -> List[Dict[str, Any]]:
        """
        Run a GA4 report.

        Args:
            property_id: GA4 property of the client
            query: Validated tool input

        Returns:
            Rows as {dimensions: [str], metrics: [float]}

        Raises:
            DataSourceNotConfigured: If the client has no property configured
            UpstreamQueryError: If the API call fails
        """
        if not property_id:
            raise DataSourceNotConfigured("No GA4 property configured for this client.")

        url = f"{ANALYTICS_DATA_BASE_URL}/properties/{property_id}:runReport"
        data = await self._post(url, {
            "dateRanges": [{
                "startDate": query.start_date.isoformat(),
                "endDate": query.end_date.isoformat(),
            }],
            "metrics": [{"name": name} for name in query.metrics],
            "dimensions": [{"name": name} for name in (query.dimensions or [])],
            "limit": str(query.row_limit),
        })

        return [
            {
                "dimensions": [d.get("value", "") for d in row.get("dimensionValues", [])],
                "metrics": [float(m.get("value", "0") or 0) for m in row.get("metricValues", [])],
            }
            for row in data.get("rows", [])
        ]
