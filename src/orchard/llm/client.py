import logging
from typing import Any, Protocol, runtime_checkable

from pydantic_ai.direct import model_request
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelRequestPart,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition as AIToolDefinition

from orchard.config import AppConfig, Config, ModelConfig
from orchard.llm.models import ChatMessage, ChatResponse, ToolCall, ToolDefinition, Usage
from orchard.utils import get_model

logger = logging.getLogger(__name__)


@runtime_checkable
class ChatClient(Protocol):
    """Anything that can answer a chat completion request."""

    async def chat(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        temperature: float | None = None,
    ) -> ChatResponse: ...


def to_model_messages(messages: list[ChatMessage]) -> list[ModelMessage]:
    """Convert chat messages into pydantic-ai request/response messages.

    Consecutive system, user and tool messages are merged into a single
    request; assistant messages become responses.
    """
    result: list[ModelMessage] = []
    pending: list[ModelRequestPart] = []

    def flush() -> None:
        if pending:
            result.append(ModelRequest(parts=list(pending)))
            pending.clear()

    for message in messages:
        if message.role == "system":
            pending.append(SystemPromptPart(content=message.content))
        elif message.role == "user":
            pending.append(UserPromptPart(content=message.content))
        elif message.role == "tool":
            pending.append(
                ToolReturnPart(
                    tool_name=message.name or "",
                    content=message.content,
                    tool_call_id=message.tool_call_id or "",
                )
            )
        else:
            flush()
            parts: list[Any] = []
            if message.content:
                parts.append(TextPart(content=message.content))
            for call in message.tool_calls:
                parts.append(
                    ToolCallPart(
                        tool_name=call.name,
                        args=call.arguments,
                        tool_call_id=call.id,
                    )
                )
            result.append(ModelResponse(parts=parts))
    flush()
    return result


def from_model_response(response: ModelResponse) -> ChatResponse:
    texts: list[str] = []
    tool_calls: list[ToolCall] = []
    for part in response.parts:
        if isinstance(part, TextPart):
            texts.append(part.content)
        elif isinstance(part, ToolCallPart):
            tool_calls.append(
                ToolCall(
                    id=part.tool_call_id,
                    name=part.tool_name,
                    arguments=part.args_as_json_str(),
                )
            )

    prompt_tokens = response.usage.input_tokens or 0
    completion_tokens = response.usage.output_tokens or 0
    return ChatResponse(
        content="".join(texts),
        tool_calls=tool_calls,
        finish_reason="tool_calls" if tool_calls else "stop",
        usage=Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


class PydanticAIChatClient:
    """ChatClient backed by a pydantic-ai model.

    Uses the direct model request API, so tool calls are returned to the
    caller instead of being executed by an agent loop.
    """

    def __init__(self, model: Model | str):
        self._model = model

    @classmethod
    def from_config(
        cls,
        model_config: ModelConfig,
        app_config: AppConfig | None = None,
    ) -> "PydanticAIChatClient":
        return cls(get_model(model_config, app_config or Config.get()))

    async def chat(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        temperature: float | None = None,
    ) -> ChatResponse:
        settings: ModelSettings | None = None
        if temperature is not None:
            settings = ModelSettings(temperature=temperature)

        parameters = ModelRequestParameters(
            function_tools=[
                AIToolDefinition(
                    name=tool.name,
                    description=tool.description,
                    parameters_json_schema=tool.parameters,
                )
                for tool in tools or []
            ],
            allow_text_output=True,
        )

        response = await model_request(
            self._model,
            to_model_messages(messages),
            model_settings=settings,
            model_request_parameters=parameters,
        )
        chat_response = from_model_response(response)
        logger.debug(
            f"Chat request returned {len(chat_response.content)} chars, "
            f"{len(chat_response.tool_calls)} tool calls"
        )
        return chat_response
