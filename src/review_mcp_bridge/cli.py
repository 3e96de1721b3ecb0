"""Command-line interface for the review bridge.

Commands:
    serve      Run the MCP server (stdio or http)
    auth-url   Print the Google consent URL
    exchange   Exchange an authorization code and save the tokens
    status     Show authentication status
    logout     Revoke and delete the saved tokens

Example:
    python -m src.review_mcp_bridge auth-url
    python -m src.review_mcp_bridge exchange 4/0AbCd...
    python -m src.review_mcp_bridge serve --transport http
"""

import argparse
import asyncio
import json
import logging

from src.exceptions import APIClientError
from src.logging_config import setup_logging
from src.review_mcp_bridge.config import BridgeConfig
from src.review_mcp_bridge.server import build_token_manager, run

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="review-mcp-bridge",
        description="Google Business Profile review MCP server",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the MCP server")
    serve.add_argument("--transport", choices=["stdio", "http"], help="Override TRANSPORT_MODE")

    subparsers.add_parser("auth-url", help="Print the Google OAuth consent URL")

    exchange = subparsers.add_parser("exchange", help="Exchange an authorization code")
    exchange.add_argument("code", help="Authorization code from the OAuth redirect")

    subparsers.add_parser("status", help="Show authentication status")
    subparsers.add_parser("logout", help="Revoke and delete saved tokens")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    command = args.command or "serve"

    try:
        config = BridgeConfig.from_env()
        if command == "serve" and args.transport:
            config.transport = args.transport
        setup_logging(config.log_level)
        config.validate()

        if command == "serve":
            run(config)
            return 0

        token_manager = build_token_manager(config)

        if command == "auth-url":
            print(token_manager.build_authorization_url())
        elif command == "exchange":
            asyncio.run(token_manager.exchange_code(args.code))
            print(f"Authentication successful. Tokens saved to {config.token_file}")
        elif command == "status":
            print(json.dumps(token_manager.status(), indent=2))
        elif command == "logout":
            asyncio.run(token_manager.revoke())
            print("Logged out")
        return 0

    except APIClientError as e:
        logger.error(f"{command} failed: {e}")
        return 1
