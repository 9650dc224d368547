from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from orchard.llm.models import ToolDefinition


class ParameterSchema(BaseModel):
    """JSON schema of a tool's arguments object."""

    type: str = "object"
    properties: dict[str, Any] = {}
    required: list[str] = []


class ToolResult(BaseModel):
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = {}

    @property
    def is_success(self) -> bool:
        return self.error is None

    def __str__(self) -> str:
        if self.error is not None:
            return f"Error: {self.error}"
        return self.output


@runtime_checkable
class Tool(Protocol):
    name: str
    description: str
    parameters: ParameterSchema

    async def execute(self, arguments: str) -> ToolResult:
        """Run the tool with JSON-encoded arguments."""
        ...


def to_definition(tool: Tool) -> ToolDefinition:
    return ToolDefinition(
        name=tool.name,
        description=tool.description,
        parameters=tool.parameters.model_dump(),
    )
