"""OAuth token lifecycle for the review bridge.

``TokenLifecycleManager`` is the single owner of the Google OAuth token set.
Every authenticated API call goes through ``ensure_fresh()`` immediately
before the request; when the token is still valid that is a pure in-memory
check.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.exceptions import (
    ExchangeFailedError,
    NoRefreshTokenError,
    NotAuthenticatedError,
    RefreshFailedError,
)
from src.review_mcp_bridge.config import BridgeConfig
from src.review_mcp_bridge.constants import (
    DEFAULT_TOKEN_LIFETIME_SECONDS,
    OAUTH_AUTHORIZE_URL,
    OAUTH_REVOKE_URL,
    OAUTH_TOKEN_URL,
)
from src.review_mcp_bridge.models import OAuthTokenSet
from src.review_mcp_bridge.token_store import TokenStore

logger = logging.getLogger(__name__)


class TokenLifecycleManager:
    """Manages Google OAuth tokens for Business Profile API access.

    Handles the authorization-code exchange, refresh on demand, revocation
    and persistence of the token set.
    """

    def __init__(
        self,
        config: BridgeConfig,
        token_store: TokenStore | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the token manager.

        Args:
            config: Bridge configuration with OAuth client credentials
            token_store: Optional persistence for the token set
            clock: Returns the current time in seconds since the epoch
        """
        self.config = config
        self._store = token_store
        self._clock = clock
        self._tokens: OAuthTokenSet | None = None
        self._exchanged_code: str | None = None
        self._token_lock = asyncio.Lock()

    @property
    def tokens(self) -> OAuthTokenSet | None:
        return self._tokens

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _expires_at(self, expires_in: Any) -> int:
        lifetime = int(expires_in) if expires_in else DEFAULT_TOKEN_LIFETIME_SECONDS
        return self._now_ms() + lifetime * 1000

    def is_valid(self) -> bool:
        """Check if the current access token is usable.

        Returns:
            True if a token set exists and has not expired
        """
        if self._tokens is None or not self._tokens.access_token:
            return False
        return self._now_ms() < self._tokens.expires_at

    async def ensure_fresh(self) -> None:
        """Make sure a valid access token is available.

        Raises:
            NotAuthenticatedError: No token set exists
            NoRefreshTokenError: Token expired and cannot be renewed
            RefreshFailedError: The refresh exchange failed
        """
        if self.is_valid():
            return

        if self._tokens is None:
            raise NotAuthenticatedError()

        async with self._token_lock:
            # Another caller may have refreshed or exchanged while we waited
            if self.is_valid():
                return
            if self._tokens is None:
                raise NotAuthenticatedError()
            if not self._tokens.refresh_token:
                raise NoRefreshTokenError()
            await self._refresh(self._tokens)

    async def _refresh(self, tokens: OAuthTokenSet) -> None:
        payload = {
            "client_id": self.config.google_client_id,
            "client_secret": self.config.google_client_secret,
            "refresh_token": tokens.refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            response = await self._post_refresh(payload)
        except httpx.HTTPError as e:
            logger.error(f"Token refresh transport error: {type(e).__name__}")
            raise RefreshFailedError(f"Failed to refresh access token: {type(e).__name__}") from e

        if response.status_code != 200:
            # Don't log the body - it may echo credentials
            logger.error(
                f"Token refresh failed: HTTP {response.status_code}",
                extra={"status_code": response.status_code},
            )
            raise RefreshFailedError(status_code=response.status_code)

        data = response.json()
        access_token = data.get("access_token")
        if not access_token:
            raise RefreshFailedError("Incomplete refresh payload returned from Google")

        tokens.access_token = access_token
        tokens.expires_at = self._expires_at(data.get("expires_in"))
        if data.get("refresh_token"):
            tokens.refresh_token = data["refresh_token"]
        if data.get("scope"):
            tokens.scope = data["scope"]

        logger.info("OAuth access token refreshed")
        self._persist()

    @retry(
        wait=wait_exponential(multiplier=0.5, max=2),
        stop=stop_after_attempt(2),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _post_refresh(self, payload: dict[str, Any]) -> httpx.Response:
        """POST a refresh request; connection-level failures get one retry."""
        async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
            return await client.post(OAUTH_TOKEN_URL, data=payload)

    async def exchange_code(self, code: str) -> OAuthTokenSet:
        """Exchange an authorization code for a token set.

        Codes are single-use upstream, so re-submitting the code that
        produced the current token set returns that token set unchanged.

        Args:
            code: Authorization code from the OAuth callback

        Returns:
            The new current token set

        Raises:
            ExchangeFailedError: If Google rejects the code or is unreachable
        """
        async with self._token_lock:
            if code == self._exchanged_code and self._tokens is not None:
                return self._tokens
            return await self._exchange(code)

    async def _exchange(self, code: str) -> OAuthTokenSet:
        payload = {
            "code": code,
            "client_id": self.config.google_client_id,
            "client_secret": self.config.google_client_secret,
            "redirect_uri": self.config.google_redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
                response = await client.post(OAUTH_TOKEN_URL, data=payload)
        except httpx.HTTPError as e:
            logger.error(f"Code exchange transport error: {type(e).__name__}")
            raise ExchangeFailedError() from e

        if response.status_code != 200:
            logger.error(
                f"Code exchange failed: HTTP {response.status_code}",
                extra={"status_code": response.status_code},
            )
            raise ExchangeFailedError(status_code=response.status_code)

        data = response.json()
        if not data.get("access_token"):
            raise ExchangeFailedError("Incomplete token payload returned from Google")

        self._tokens = OAuthTokenSet(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope", ""),
            token_type="Bearer",
            expires_at=self._expires_at(data.get("expires_in")),
        )
        self._exchanged_code = code

        if not self._tokens.refresh_token:
            logger.warning("Google issued no refresh token; re-consent will be needed on expiry")
        logger.info("OAuth authentication successful")
        self._persist()
        return self._tokens

    async def revoke(self) -> None:
        """Revoke the tokens upstream (best effort) and clear local state."""
        if self._tokens is not None:
            token = self._tokens.refresh_token or self._tokens.access_token
            if token:
                try:
                    async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
                        response = await client.post(OAUTH_REVOKE_URL, data={"token": token})
                    if response.status_code != 200:
                        logger.warning(f"Token revocation returned HTTP {response.status_code}")
                except httpx.HTTPError as e:
                    logger.warning(f"Error revoking tokens: {type(e).__name__}")

        self._tokens = None
        self._exchanged_code = None
        if self._store is not None:
            self._store.clear()
        logger.info("User logged out")

    def restore(self) -> bool:
        """Load persisted tokens, or bootstrap from a configured refresh token.

        A bootstrapped token set has no access token and is already expired,
        so the first API call performs a refresh.

        Returns:
            True if a token set is now held
        """
        tokens = self._store.load() if self._store is not None else None
        if tokens is not None:
            self._tokens = tokens
            logger.info("Restored OAuth tokens from token file")
            return True

        if self.config.google_refresh_token:
            self._tokens = OAuthTokenSet(
                access_token="",
                refresh_token=self.config.google_refresh_token,
                scope=" ".join(self.config.scopes),
                expires_at=0,
            )
            logger.info("Seeded OAuth tokens from configured refresh token")
            return True

        return False

    def _persist(self) -> None:
        if self._store is not None and self._tokens is not None:
            self._store.save(self._tokens)

    def get_auth_headers(self) -> dict[str, str]:
        """Get authorization headers for API requests.

        Call ``ensure_fresh()`` first; this only reads the current token.

        Raises:
            NotAuthenticatedError: If no access token is held
        """
        if self._tokens is None or not self._tokens.access_token:
            raise NotAuthenticatedError()
        return {"Authorization": f"{self._tokens.token_type} {self._tokens.access_token}"}

    def build_authorization_url(self, state: str | None = None) -> str:
        """Construct the Google OAuth consent URL (offline access)."""
        params = {
            "client_id": self.config.google_client_id,
            "redirect_uri": self.config.google_redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.config.scopes),
            "access_type": "offline",
            "include_granted_scopes": "true",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{OAUTH_AUTHORIZE_URL}?{urlencode(params)}"

    def status(self) -> dict[str, Any]:
        """Authentication summary without secrets."""
        return {
            "authenticated": self.is_valid(),
            "has_tokens": self._tokens is not None,
            "has_refresh_token": bool(self._tokens and self._tokens.refresh_token),
            "expires_at": self._tokens.expires_at if self._tokens else None,
            "scope": self._tokens.scope if self._tokens else None,
        }
