"""Authenticated HTTP access to the Google Business Profile APIs.

``ApiRequestExecutor`` is the only place that talks to the Business Profile
REST endpoints. Each request:

1. calls ``TokenLifecycleManager.ensure_fresh()``
2. sends the request with the current bearer token
3. raises ``ApiRequestError`` (status + raw body) on any non-2xx response,
   and ``ApiTransportError`` when upstream is unreachable or the body is
   not JSON
4. returns the parsed JSON verbatim otherwise

Mapping and validation of the returned JSON happen in the callers.

Example:
    >>> executor = ApiRequestExecutor(token_manager)
    >>> data = await executor.get(
    ...     "accounts/123/locations/456/reviews", params={"pageSize": 50}
    ... )
"""

import logging
from typing import Any

import httpx

from src.exceptions import ApiRequestError, ApiTransportError, NoAccountsFoundError
from src.review_mcp_bridge.auth import TokenLifecycleManager
from src.review_mcp_bridge.constants import (
    ACCOUNT_MANAGEMENT_API_BASE,
    ACCOUNTS_PAGE_SIZE,
    BUSINESS_INFORMATION_API_BASE,
    LOCATION_READ_MASK,
    PROFILE_READ_MASK,
    REVIEWS_API_BASE,
)

logger = logging.getLogger(__name__)


class ApiRequestExecutor:
    """Single authenticated request surface for the Business Profile APIs.

    Attributes:
        token_manager: Supplies fresh bearer tokens
        timeout: Per-request timeout in seconds
    """

    def __init__(self, token_manager: TokenLifecycleManager, timeout: float = 30.0):
        self.token_manager = token_manager
        self.timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        *,
        base_url: str = REVIEWS_API_BASE,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated API request.

        Args:
            method: HTTP method (GET, PUT, POST)
            path: Resource path relative to ``base_url``
            base_url: API base URL
            params: Query parameters; None values are dropped
            json_data: Request body

        Returns:
            Parsed JSON response ({} for an empty body)

        Raises:
            AuthenticationError: If no fresh token can be obtained
            ApiRequestError: If the API returns a non-2xx status
            ApiTransportError: On connection failure, timeout or a non-JSON body
        """
        await self.token_manager.ensure_fresh()
        headers = {
            **self.token_manager.get_auth_headers(),
            "Content-Type": "application/json",
        }
        url = f"{base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}

        logger.debug(f"API {method} {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    params=query or None,
                    json=json_data,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.error(f"API request failed: {method} {path} {type(e).__name__}: {e}")
            raise ApiTransportError(f"API request failed: {type(e).__name__}: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(
                f"API request failed: {method} {path} HTTP {response.status_code}",
                extra={"status_code": response.status_code},
            )
            raise ApiRequestError(response.status_code, response.text)

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"API response is not JSON: {method} {path}")
            raise ApiTransportError(
                "API returned an invalid JSON body",
                status_code=response.status_code,
            ) from e

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        base_url: str = REVIEWS_API_BASE,
    ) -> dict[str, Any]:
        return await self._request("GET", path, base_url=base_url, params=params)

    async def put(
        self,
        path: str,
        body: dict[str, Any],
        base_url: str = REVIEWS_API_BASE,
    ) -> dict[str, Any]:
        return await self._request("PUT", path, base_url=base_url, json_data=body)

    async def post(
        self,
        path: str,
        body: dict[str, Any],
        base_url: str = REVIEWS_API_BASE,
    ) -> dict[str, Any]:
        return await self._request("POST", path, base_url=base_url, json_data=body)

    # =========================================================================
    # Accounts and locations
    # =========================================================================

    async def get_first_account(self) -> dict[str, Any]:
        """Get the first Business Profile account of the authenticated user.

        Raises:
            NoAccountsFoundError: If the user has no accounts
        """
        data = await self.get(
            "accounts", params={"pageSize": 1}, base_url=ACCOUNT_MANAGEMENT_API_BASE
        )
        accounts = data.get("accounts") or []
        if not accounts:
            raise NoAccountsFoundError()
        return accounts[0]

    async def list_accounts(self, page_size: int = ACCOUNTS_PAGE_SIZE) -> list[dict[str, Any]]:
        """List all accounts, following pagination."""
        accounts: list[dict[str, Any]] = []
        page_token = None
        while True:
            data = await self.get(
                "accounts",
                params={"pageSize": page_size, "pageToken": page_token},
                base_url=ACCOUNT_MANAGEMENT_API_BASE,
            )
            accounts.extend(data.get("accounts") or [])
            page_token = data.get("nextPageToken")
            if not page_token:
                return accounts

    async def list_account_locations(self, account_name: str) -> list[dict[str, Any]]:
        """List every location of one account, following pagination."""
        locations: list[dict[str, Any]] = []
        page_token = None
        while True:
            data = await self.get(
                f"{account_name}/locations",
                params={
                    "readMask": LOCATION_READ_MASK,
                    "pageSize": ACCOUNTS_PAGE_SIZE,
                    "pageToken": page_token,
                },
                base_url=BUSINESS_INFORMATION_API_BASE,
            )
            locations.extend(data.get("locations") or [])
            page_token = data.get("nextPageToken")
            if not page_token:
                return locations

    async def get_location(self, full_location_path: str) -> dict[str, Any]:
        """Fetch detailed information for one location."""
        return await self.get(
            full_location_path,
            params={"readMask": PROFILE_READ_MASK},
            base_url=BUSINESS_INFORMATION_API_BASE,
        )
