#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "mcp>=1.10.0,<2",
#   "anyio>=4.0.0",
#   "python-dotenv>=1.0.0",
#   "pydantic>=2.0.0",
#   "rich>=13.0.0",
# ]
# ///
"""Git Repo Browser executable shim for running from a checked-out repository."""

import sys

from git_repo_browser.cli import main


if __name__ == "__main__":
    sys.exit(main())
