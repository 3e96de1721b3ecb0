"""Configuration for the Google Business Profile review MCP bridge."""

import os
from dataclasses import dataclass, field
from typing import Any

from src.exceptions import ConfigurationError
from src.review_mcp_bridge.constants import DEFAULT_MAX_PAGES, OAUTH_SCOPES


@dataclass
class BridgeConfig:
    """Configuration for the review bridge.

    Attributes:
        google_client_id: Google OAuth Client ID
        google_client_secret: Google OAuth Client Secret
        google_redirect_uri: Redirect URI registered for the OAuth client
        google_refresh_token: Optional refresh token used to bootstrap auth
            when no token file exists yet
        token_file: Path of the JSON file holding the persisted token set
        server_name: MCP server name announced to clients
        server_version: MCP server version announced to clients
        transport: "stdio" or "http"
        host: Bind host for HTTP mode
        port: Bind port for HTTP mode
        log_level: Root log level
        bridge_token: Bearer token required on /mcp in HTTP mode (empty
            disables the check)
        http_timeout: Timeout in seconds for every upstream request
        max_pages: Upper bound on upstream review pages walked per call
        scopes: OAuth scopes to request
    """

    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:3000/auth/callback"
    google_refresh_token: str = ""
    token_file: str = ".tokens.json"
    server_name: str = "google-business-review-mcp-server"
    server_version: str = "1.0.0"
    transport: str = "stdio"
    host: str = "localhost"
    port: int = 3000
    log_level: str = "INFO"
    bridge_token: str = ""
    http_timeout: float = 30.0
    max_pages: int = DEFAULT_MAX_PAGES
    scopes: list[str] = field(default_factory=lambda: list(OAUTH_SCOPES))

    @classmethod
    def from_env(cls) -> "BridgeConfig":
        """Load configuration from environment variables.

        Returns:
            BridgeConfig with values from environment

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        try:
            port = int(os.getenv("PORT", "3000"))
            http_timeout = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
            max_pages = int(os.getenv("REVIEW_MAX_PAGES", str(DEFAULT_MAX_PAGES)))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        return cls(
            google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
            google_redirect_uri=os.getenv(
                "GOOGLE_REDIRECT_URI", "http://localhost:3000/auth/callback"
            ),
            google_refresh_token=os.getenv("GOOGLE_REFRESH_TOKEN", ""),
            token_file=os.getenv("GBP_TOKEN_FILE", ".tokens.json"),
            server_name=os.getenv("MCP_SERVER_NAME", "google-business-review-mcp-server"),
            server_version=os.getenv("MCP_SERVER_VERSION", "1.0.0"),
            transport=os.getenv("TRANSPORT_MODE", "stdio").lower(),
            host=os.getenv("HOST", "localhost"),
            port=port,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            bridge_token=os.getenv("REVIEW_BRIDGE_TOKEN", ""),
            http_timeout=http_timeout,
            max_pages=max_pages,
        )

    def validate(self) -> None:
        """Check that OAuth client credentials are present.

        Raises:
            ConfigurationError: Listing every missing variable
        """
        missing = []
        if not self.google_client_id:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.google_client_secret:
            missing.append("GOOGLE_CLIENT_SECRET")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        if self.transport not in ("stdio", "http"):
            raise ConfigurationError(f"Unknown transport mode: {self.transport}")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (without secrets).

        Returns:
            Dictionary with non-sensitive configuration
        """
        return {
            "server_name": self.server_name,
            "server_version": self.server_version,
            "transport": self.transport,
            "scopes": self.scopes,
            "token_file": self.token_file,
            "max_pages": self.max_pages,
            "has_oauth_client": bool(self.google_client_id),
            "has_oauth_secret": bool(self.google_client_secret),
            "has_refresh_token": bool(self.google_refresh_token),
            "has_bridge_token": bool(self.bridge_token),
        }
