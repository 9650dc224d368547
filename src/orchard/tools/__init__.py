from orchard.tools.base import ParameterSchema, Tool, ToolResult, to_definition
from orchard.tools.calculator import CalculatorTool
from orchard.tools.registry import ToolRegistry

__all__ = [
    "CalculatorTool",
    "ParameterSchema",
    "Tool",
    "ToolRegistry",
    "ToolResult",
    "to_definition",
]
