"""MCP stdio server publishing the git tools."""

import logging
from typing import Any, Dict, List, Optional

import anyio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from git_repo_browser import __version__
from git_repo_browser.config import BrowserConfig
from git_repo_browser.git import create_git_tools
from git_repo_browser.git.cache import RepositoryCache
from git_repo_browser.git.runner import GitRunner
from git_repo_browser.middleware import logging_tool_middleware
from git_repo_browser.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """Raised to report a failed tool call; the message is the rendered error body."""

    pass


def build_registry(
    config: BrowserConfig,
    runner: Optional[GitRunner] = None,
    cache: Optional[RepositoryCache] = None,
) -> ToolRegistry:
    """Build the tool registry with the standard middleware chain."""
    return ToolRegistry(
        create_git_tools(config, runner=runner, cache=cache),
        middleware=[logging_tool_middleware],
    )


class GitBrowserServer:
    """
    MCP server exposing the tool registry over stdio.

    Tool handlers are blocking; each call runs in a worker thread so the
    protocol loop keeps serving other requests.
    """

    def __init__(self, config: Optional[BrowserConfig] = None, registry: Optional[ToolRegistry] = None):
        """
        Initialize the server.

        Args:
            config: Browser configuration (loaded from environment if not provided)
            registry: Tool registry (built from config if not provided)
        """
        self.config = config or BrowserConfig()
        self.registry = registry or build_registry(self.config)
        self.server = Server(self.config.server_name)
        self._register_handlers()

    def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema(),
            )
            for tool in self.registry
        ]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        """
        Run a tool and wrap its rendered output as text content.

        Raises:
            ToolCallError: If the tool reported a failure; the MCP layer turns
                this into a result flagged as an error
        """
        response = await anyio.to_thread.run_sync(self.registry.call, name, arguments)
        if response.is_error:
            raise ToolCallError(response.render())
        return [types.TextContent(type="text", text=response.render())]

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return self.list_tools()

        # Arguments are validated by the registry against the parameter models
        @self.server.call_tool(validate_input=False)
        async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

    def initialization_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=self.config.server_name,
            server_version=__version__,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )

    async def run(self) -> None:
        """Serve MCP requests on stdin/stdout until the client disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"{self.config.server_name} running on stdio with {len(self.registry)} tools")
            await self.server.run(read_stream, write_stream, self.initialization_options())
