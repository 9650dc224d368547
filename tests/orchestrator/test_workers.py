import pytest

from orchard.agents.orchestrator.workers import (
    CHAT_NOT_CONFIGURED,
    WorkerAgent,
    calculator_worker,
    default_workers,
)
from orchard.llm.models import ToolCall, Usage
from orchard.tools import CalculatorTool, ParameterSchema, ToolRegistry, ToolResult


class ExplodingTool:
    name = "explode"
    description = "Always raises"
    parameters = ParameterSchema()

    async def execute(self, arguments: str) -> ToolResult:
        raise RuntimeError("kaboom")


@pytest.mark.asyncio
class TestWorkerAgent:
    async def test_without_chat_returns_failure(self):
        worker = WorkerAgent(name="general")
        result, usage = await worker.execute("anything", task_id="task_1")
        assert result.success is False
        assert result.error == CHAT_NOT_CONFIGURED
        assert result.id == "task_1"
        assert usage == Usage()

    async def test_default_prompt(self, scripted_chat):
        chat = scripted_chat()
        worker = WorkerAgent(name="poet", description="Writes poems.", chat=chat)
        assert worker.prompt == "You are a poet agent. Writes poems."

        result, _ = await worker.execute("a haiku")
        assert result.success
        messages = chat.calls[0]["messages"]
        assert messages[0].role == "system"
        assert messages[0].content == "You are a poet agent. Writes poems."
        assert messages[1].content == "a haiku"

    async def test_plain_chat_returns_content_and_usage(self, scripted_chat, make_reply):
        chat = scripted_chat(lambda messages, tools: make_reply("done", tokens=5))
        worker = WorkerAgent(name="writer", system_prompt="Write.", chat=chat)
        result, usage = await worker.execute("essay")
        assert result.output == "done"
        assert usage.total_tokens == 10
        assert chat.calls[0]["tools"] is None

    async def test_chat_failure_is_captured(self, scripted_chat):
        def fail(messages, tools):
            raise ConnectionError("provider down")

        worker = WorkerAgent(name="general", chat=scripted_chat(fail))
        result, usage = await worker.execute("x", task_id="t")
        assert result.success is False
        assert result.error == "provider down"
        assert usage == Usage()

    async def test_executes_requested_tools(self, scripted_chat, make_reply):
        def respond(messages, tools):
            assert [t.name for t in tools] == ["calculator"]
            return make_reply(
                "",
                tool_calls=[
                    ToolCall(id="1", name="calculator", arguments='{"expression": "6 * 7"}'),
                    ToolCall(id="2", name="calculator", arguments='{"expression": "1 / 0"}'),
                ],
            )

        registry = ToolRegistry([CalculatorTool(), ExplodingTool()])
        worker = calculator_worker(scripted_chat(respond), registry)
        result, _ = await worker.execute("compute")
        assert result.success
        assert result.output == "calculator: 42\ncalculator: Error: division by zero"

    async def test_tool_exception_reported_inline(self, scripted_chat, make_reply):
        def respond(messages, tools):
            return make_reply(
                "",
                tool_calls=[
                    ToolCall(name="explode"),
                    ToolCall(name="unknown"),
                    ToolCall(name="calculator", arguments='{"expression": "2+2"}'),
                ],
            )

        registry = ToolRegistry([CalculatorTool(), ExplodingTool()])
        worker = WorkerAgent(
            name="mixed",
            tool_names=("explode", "calculator"),
            chat=scripted_chat(respond),
            tools=registry,
        )
        result, _ = await worker.execute("go")
        assert result.output == "explode error: kaboom\ncalculator: 4"

    async def test_tools_without_registry_fall_back_to_chat(self, scripted_chat):
        chat = scripted_chat()
        worker = calculator_worker(chat, None)
        result, _ = await worker.execute("what is 2+2")
        assert result.output == "what is 2+2"
        assert chat.calls[0]["tools"] is None

    async def test_unsolicited_tool_calls_without_registry(
        self, scripted_chat, make_reply
    ):
        chat = scripted_chat(
            lambda messages, tools: make_reply(
                "plain answer",
                tool_calls=[ToolCall(name="calculator", arguments='{"expression": "1"}')],
            )
        )
        worker = calculator_worker(chat, None)
        result, _ = await worker.execute("what is 1")
        assert result.success
        assert result.output == "plain answer"

    async def test_text_reply_when_model_skips_tools(self, scripted_chat, make_reply):
        chat = scripted_chat(lambda messages, tools: make_reply("four"))
        worker = calculator_worker(chat, ToolRegistry([CalculatorTool()]))
        result, _ = await worker.execute("what is 2+2")
        assert result.output == "four"
        assert [t.name for t in chat.calls[0]["tools"]] == ["calculator"]


def test_with_capabilities_returns_bound_copy(scripted_chat):
    worker = WorkerAgent(name="general")
    chat = scripted_chat()
    bound = worker.with_capabilities(chat)
    assert bound is not worker
    assert bound.chat is chat
    assert worker.chat is None
    assert bound == worker


def test_default_workers():
    workers = default_workers()
    assert [w.name for w in workers] == ["general", "calculator", "researcher", "writer"]
    calculator = workers[1]
    assert calculator.tool_names == ("calculator",)
    assert "calculator tool" in calculator.system_prompt
