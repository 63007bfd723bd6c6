"""Console entry point for the git repository browser."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import BrowserConfig
from .server import GitBrowserServer, build_registry

console = Console()

# stdout carries the MCP protocol, so diagnostics go to stderr
err_console = Console(stderr=True)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("git_repo_browser").setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="git-repo-browser",
        description="Git Repo Browser - MCP server for git repository operations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  (none)              Run the MCP server on stdio (default)
  serve               Run the MCP server on stdio
  tools               List available tools
  call                Invoke a single tool and print its result

Examples:
  git-repo-browser                                      # Serve over stdio
  git-repo-browser tools                                # List tools
  git-repo-browser call git_local_changes --args '{"repo_path": "."}'
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Run the MCP server on stdio")
    subparsers.add_parser("tools", help="List available tools")

    call_parser = subparsers.add_parser(
        "call",
        help="Invoke a single tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    call_parser.add_argument("tool", help="Tool name (e.g., git_local_changes)")
    call_parser.add_argument(
        "--args",
        dest="tool_args",
        default="{}",
        help="Tool arguments as a JSON object",
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Override the configured log level",
    )

    return parser


def list_tools(config: BrowserConfig) -> int:
    registry = build_registry(config)

    table = Table(title="Git Tools", expand=True, show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Required", style="dim")

    for tool in registry:
        required = ", ".join(tool.input_schema().get("required", []))
        table.add_row(tool.name, tool.description, required)

    console.print(table)
    return 0


def call_tool(config: BrowserConfig, name: str, raw_arguments: str) -> int:
    """Invoke one tool locally and print its rendered result."""
    try:
        arguments = json.loads(raw_arguments)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] --args is not valid JSON: {e}", style="bold red")
        return 2

    if not isinstance(arguments, dict):
        console.print("[red]Error:[/red] --args must be a JSON object", style="bold red")
        return 2

    response = build_registry(config).call(name, arguments)
    data = response.to_data()
    if isinstance(data, str):
        console.print(data, markup=False, highlight=False, soft_wrap=True)
    else:
        console.print_json(data=data)

    return 1 if response.is_error else 0


async def async_main(args: Optional[list[str]] = None) -> int:
    """Entry point that supports asyncio execution."""
    parser = build_parser()
    parsed = parser.parse_args(args=args)

    try:
        config = BrowserConfig()
    except ValueError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}", style="bold red")
        return 1

    setup_logging(parsed.log_level or config.log_level)

    if parsed.command == "tools":
        return list_tools(config)

    if parsed.command == "call":
        return call_tool(config, parsed.tool, parsed.tool_args)

    await GitBrowserServer(config).run()
    return 0


def main(args: Optional[list[str]] = None) -> int:
    """Synchronous entry point for console_scripts."""
    return asyncio.run(async_main(args))
