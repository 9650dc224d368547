import ast
import json
import logging
import operator

from orchard.tools.base import ParameterSchema, ToolResult

logger = logging.getLogger(__name__)

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

MAX_EXPONENT = 1000
MAX_RESULT_BITS = 4096


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression without executing arbitrary code.

    Supports numbers, parentheses, unary +/- and the operators
    + - * / // % **.

    Raises:
        ValueError: If the expression is malformed or uses anything else.
        ZeroDivisionError: On division by zero.
    """
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"invalid expression: {expression!r}") from e
    return float(_eval_node(tree.body))


def _eval_node(node: ast.AST) -> float:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Pow):
            _check_power(left, right)
        value = _BINARY_OPS[type(node.op)](left, right)
        if isinstance(value, int) and value.bit_length() > MAX_RESULT_BITS:
            raise ValueError("result too large")
        return value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ValueError(f"unsupported syntax: {ast.dump(node)}")


def _check_power(base: float, exponent: float) -> None:
    if abs(exponent) > MAX_EXPONENT:
        raise ValueError("exponent too large")
    # Bound integer results before pow materializes them.
    if (
        isinstance(base, int)
        and exponent > 0
        and base.bit_length() * exponent > MAX_RESULT_BITS
    ):
        raise ValueError("result too large")


def format_number(value: float) -> str:
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


class CalculatorTool:
    name = "calculator"
    description = (
        "Evaluates arithmetic expressions. Supports +, -, *, /, //, %, ** "
        "and parentheses."
    )
    parameters = ParameterSchema(
        properties={
            "expression": {
                "type": "string",
                "description": "The arithmetic expression to evaluate, e.g. '(2 + 3) * 4'",
            }
        },
        required=["expression"],
    )

    async def execute(self, arguments: str) -> ToolResult:
        try:
            args = json.loads(arguments or "{}")
        except json.JSONDecodeError as e:
            return ToolResult(error=f"invalid arguments: {e}")

        expression = args.get("expression") if isinstance(args, dict) else None
        if not isinstance(expression, str) or not expression.strip():
            return ToolResult(error="missing required argument: expression")

        try:
            value = evaluate(expression)
        except ZeroDivisionError:
            return ToolResult(error="division by zero")
        except (ValueError, TypeError, OverflowError) as e:
            return ToolResult(error=str(e))

        logger.debug(f"Calculated {expression} = {value}")
        return ToolResult(
            output=format_number(value),
            metadata={"expression": expression},
        )
