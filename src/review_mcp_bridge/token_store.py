"""File persistence for the OAuth token set.

The token set survives restarts in a small JSON file. Failures are logged
and reported through return values; a broken token file must never stop the
server from starting (the user can simply re-authenticate).
"""

import json
import logging
import os
from pathlib import Path

from src.review_mcp_bridge.models import OAuthTokenSet

logger = logging.getLogger(__name__)


class TokenStore:
    """Reads and writes the token set as JSON at a fixed path."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists() and self.path.stat().st_size > 0

    def load(self) -> OAuthTokenSet | None:
        """Load the persisted token set.

        Returns:
            The token set, or None if the file is missing, empty or invalid
        """
        if not self.exists():
            logger.debug("No token file found")
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            tokens = OAuthTokenSet.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading tokens from {self.path}: {type(e).__name__}")
            return None

        logger.debug("Tokens loaded from disk")
        return tokens

    def save(self, tokens: OAuthTokenSet) -> bool:
        """Write the token set, readable by the owner only.

        Returns:
            True if the file was written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(tokens.to_dict(), indent=2), encoding="utf-8")
            os.chmod(self.path, 0o600)
        except OSError as e:
            logger.error(f"Error saving tokens to {self.path}: {e}")
            return False

        logger.debug("Tokens saved to disk")
        return True

    def clear(self) -> bool:
        """Remove the persisted token set.

        Returns:
            True if no token file remains
        """
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error clearing tokens at {self.path}: {e}")
            return False

        logger.debug("Tokens cleared")
        return True
