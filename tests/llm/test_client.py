import json

import pytest
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from orchard.llm import ChatClient, ChatMessage, PydanticAIChatClient, ToolCall, ToolDefinition
from orchard.llm.client import to_model_messages
from orchard.llm.models import Usage


def test_to_model_messages_groups_requests():
    messages = [
        ChatMessage(role="system", content="be brief"),
        ChatMessage(role="user", content="hi"),
        ChatMessage(
            role="assistant",
            content="",
            tool_calls=[ToolCall(id="c1", name="calculator", arguments='{"expression": "1+1"}')],
        ),
        ChatMessage(role="tool", content="2", name="calculator", tool_call_id="c1"),
    ]

    converted = to_model_messages(messages)

    assert len(converted) == 3
    first, second, third = converted
    assert isinstance(first, ModelRequest)
    assert isinstance(first.parts[0], SystemPromptPart)
    assert isinstance(first.parts[1], UserPromptPart)
    assert isinstance(second, ModelResponse)
    assert isinstance(second.parts[0], ToolCallPart)
    assert second.parts[0].tool_name == "calculator"
    assert isinstance(third, ModelRequest)
    assert isinstance(third.parts[0], ToolReturnPart)
    assert third.parts[0].tool_call_id == "c1"


@pytest.mark.asyncio
class TestPydanticAIChatClient:
    async def test_text_reply(self):
        seen = {}

        def respond(messages, info: AgentInfo) -> ModelResponse:
            seen["tools"] = info.function_tools
            seen["parts"] = [p for m in messages for p in m.parts]
            return ModelResponse(parts=[TextPart("hello there")])

        client = PydanticAIChatClient(FunctionModel(respond))
        response = await client.chat(
            [
                ChatMessage(role="system", content="sys"),
                ChatMessage(role="user", content="hello"),
            ]
        )

        assert response.content == "hello there"
        assert response.tool_calls == []
        assert response.finish_reason == "stop"
        assert isinstance(response.usage, Usage)
        assert seen["tools"] == []
        assert [type(p) for p in seen["parts"]] == [SystemPromptPart, UserPromptPart]

    async def test_tool_call_reply(self):
        def respond(messages, info: AgentInfo) -> ModelResponse:
            assert [t.name for t in info.function_tools] == ["calculator"]
            return ModelResponse(
                parts=[
                    ToolCallPart(
                        tool_name="calculator",
                        args={"expression": "2*21"},
                        tool_call_id="call_1",
                    )
                ]
            )

        client = PydanticAIChatClient(FunctionModel(respond))
        response = await client.chat(
            [ChatMessage(role="user", content="compute")],
            tools=[
                ToolDefinition(
                    name="calculator",
                    description="math",
                    parameters={
                        "type": "object",
                        "properties": {"expression": {"type": "string"}},
                        "required": ["expression"],
                    },
                )
            ],
            temperature=0.1,
        )

        assert response.has_tool_calls
        assert response.finish_reason == "tool_calls"
        call = response.tool_calls[0]
        assert call.id == "call_1"
        assert call.name == "calculator"
        assert json.loads(call.arguments) == {"expression": "2*21"}


def test_satisfies_protocol():
    client = PydanticAIChatClient(FunctionModel(lambda m, i: ModelResponse(parts=[])))
    assert isinstance(client, ChatClient)


def test_usage_addition():
    total = Usage(prompt_tokens=1, completion_tokens=2, total_tokens=3) + Usage(
        prompt_tokens=4, completion_tokens=5, total_tokens=9
    )
    assert total == Usage(prompt_tokens=5, completion_tokens=7, total_tokens=12)
