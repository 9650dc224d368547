from collections.abc import Iterable

from orchard.llm.models import ToolDefinition
from orchard.tools.base import Tool, to_definition


class ToolRegistry:
    """Name-indexed collection of tools available to workers."""

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    def count(self) -> int:
        return len(self._tools)

    def definitions(self, names: Iterable[str] | None = None) -> list[ToolDefinition]:
        """Tool definitions for the given names, in the order requested.

        Unknown names are skipped. With no names, every registered tool is
        returned in registration order.
        """
        if names is None:
            return [to_definition(tool) for tool in self._tools.values()]
        return [
            to_definition(self._tools[name]) for name in names if name in self._tools
        ]

    # Kept last: shadows the builtin within the class body.
    def list(self) -> "list[Tool]":
        return [*self._tools.values()]
