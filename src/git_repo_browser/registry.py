"""Static registry mapping tool names to their definitions."""

import functools
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from git_repo_browser.results import ToolResponse
from git_repo_browser.middleware import ToolInvocationContext, ToolMiddleware

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A named tool: its description, parameter model and handler."""

    name: str
    description: str
    params: Type[BaseModel]
    handler: Callable[[BaseModel], ToolResponse]

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema of the tool's arguments, as published to clients."""
        return self.params.model_json_schema()


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


class ToolRegistry:
    """
    Immutable lookup table of tools.

    The registry is populated once at construction. Calls are validated
    against the tool's parameter model and run through the middleware chain.
    """

    def __init__(
        self,
        tools: Iterable[ToolDefinition],
        middleware: Optional[List[ToolMiddleware]] = None,
    ):
        """
        Build the registry.

        Args:
            tools: Tool definitions; names must be unique
            middleware: Middleware applied to every call, outermost first

        Raises:
            ValueError: If two tools share a name
        """
        table: Dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in table:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            table[tool.name] = tool

        self._tools: Mapping[str, ToolDefinition] = MappingProxyType(table)
        self._middleware = tuple(middleware or ())

    @property
    def tools(self) -> Mapping[str, ToolDefinition]:
        return self._tools

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResponse:
        """
        Invoke a tool by name.

        Args:
            name: Registered tool name
            arguments: Raw argument object from the client

        Returns:
            The tool's response; unknown names, invalid arguments and
            unexpected handler errors are returned as failures
        """
        tool = self._tools.get(name)
        if tool is None:
            return ToolResponse.failure(f"Unknown tool: {name}")

        arguments = dict(arguments or {})
        try:
            params = tool.params.model_validate(arguments)
        except ValidationError as e:
            return ToolResponse.failure(f"Invalid arguments for {name}: {_format_validation_error(e)}")

        def execute(context: ToolInvocationContext) -> None:
            context.result = tool.handler(params)

        chain: Callable[[ToolInvocationContext], None] = execute
        for middleware in reversed(self._middleware):
            chain = functools.partial(middleware, next=chain)

        context = ToolInvocationContext(tool_name=name, arguments=arguments)
        try:
            chain(context)
        except Exception as e:
            logger.error(f"Unhandled error in tool {name}: {e}", exc_info=True)
            return ToolResponse.failure(f"Failed to run {name}: {e}")

        if context.result is None:
            return ToolResponse.failure(f"Tool {name} returned no result")
        return context.result
