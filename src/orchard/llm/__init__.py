from orchard.llm.client import ChatClient, PydanticAIChatClient
from orchard.llm.models import ChatMessage, ChatResponse, ToolCall, ToolDefinition, Usage

__all__ = [
    "ChatClient",
    "PydanticAIChatClient",
    "ChatMessage",
    "ChatResponse",
    "ToolCall",
    "ToolDefinition",
    "Usage",
]
