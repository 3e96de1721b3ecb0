"""Entry point: python -m src.review_mcp_bridge"""

import sys

from src.review_mcp_bridge.cli import main

sys.exit(main())
