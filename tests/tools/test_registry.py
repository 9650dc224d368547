import pytest

from orchard.tools import CalculatorTool, ParameterSchema, Tool, ToolRegistry, ToolResult


class EchoTool:
    name = "echo"
    description = "Echoes its arguments"
    parameters = ParameterSchema(properties={"text": {"type": "string"}})

    async def execute(self, arguments: str) -> ToolResult:
        return ToolResult(output=arguments)


def test_register_and_lookup():
    registry = ToolRegistry()
    calculator = CalculatorTool()
    registry.register(calculator)

    assert registry.has("calculator")
    assert registry.get("calculator") is calculator
    assert registry.get("missing") is None
    assert registry.count() == 1
    assert registry.names() == ["calculator"]
    assert registry.list() == [calculator]


def test_duplicate_registration_rejected():
    registry = ToolRegistry([EchoTool()])
    with pytest.raises(ValueError):
        registry.register(EchoTool())


def test_definitions_filter_in_requested_order():
    registry = ToolRegistry([CalculatorTool(), EchoTool()])

    definitions = registry.definitions(["echo", "missing", "calculator"])

    assert [d.name for d in definitions] == ["echo", "calculator"]
    calculator = definitions[1]
    assert calculator.parameters["type"] == "object"
    assert calculator.parameters["required"] == ["expression"]
    assert [d.name for d in registry.definitions()] == ["calculator", "echo"]


def test_tools_satisfy_protocol():
    assert isinstance(CalculatorTool(), Tool)
    assert isinstance(EchoTool(), Tool)


def test_tool_result_str():
    assert str(ToolResult(output="ok")) == "ok"
    assert str(ToolResult(error="bad")) == "Error: bad"
