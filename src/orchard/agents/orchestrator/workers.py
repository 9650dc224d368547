import logging
from dataclasses import dataclass, field, replace

from orchard.agents.orchestrator.models import SubtaskResult
from orchard.agents.orchestrator.prompts import (
    CALCULATOR_WORKER_PROMPT,
    GENERAL_WORKER_PROMPT,
    RESEARCHER_WORKER_PROMPT,
    WRITER_WORKER_PROMPT,
)
from orchard.llm.client import ChatClient
from orchard.llm.models import ChatMessage, ChatResponse, ToolDefinition, Usage
from orchard.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

CHAT_NOT_CONFIGURED = "chat client not configured for worker"


@dataclass(frozen=True)
class WorkerAgent:
    """A named capability profile that executes subtasks.

    Workers hold no per-run state and are shared across concurrent
    subtasks. The chat client and tool registry are bound at construction;
    use with_capabilities to derive a bound copy.

    Attributes:
        name: Worker type matched against Subtask.worker_type
        description: Short description of the worker's specialty
        system_prompt: System prompt; a generic one is derived when empty
        tool_names: Registry tools this worker may call
    """

    name: str
    description: str = ""
    system_prompt: str = ""
    tool_names: tuple[str, ...] = ()
    chat: ChatClient | None = field(default=None, repr=False, compare=False)
    tools: ToolRegistry | None = field(default=None, repr=False, compare=False)

    def with_capabilities(
        self, chat: ChatClient | None, tools: ToolRegistry | None = None
    ) -> "WorkerAgent":
        return replace(self, chat=chat, tools=tools)

    @property
    def prompt(self) -> str:
        if self.system_prompt:
            return self.system_prompt
        return f"You are a {self.name} agent. {self.description}"

    def tool_definitions(self) -> list[ToolDefinition]:
        if not self.tool_names or self.tools is None:
            return []
        return self.tools.definitions(self.tool_names)

    async def execute(
        self, task_input: str, task_id: str = ""
    ) -> tuple[SubtaskResult, Usage]:
        """Run the worker on one input.

        Chat failures are returned as unsuccessful results, never raised.
        """
        if self.chat is None:
            return SubtaskResult(
                id=task_id, success=False, error=CHAT_NOT_CONFIGURED
            ), Usage()

        messages = [
            ChatMessage(role="system", content=self.prompt),
            ChatMessage(role="user", content=task_input),
        ]
        definitions = self.tool_definitions()

        try:
            response = await self.chat.chat(messages, tools=definitions or None)
        except Exception as e:
            logger.warning(f"Worker {self.name} failed on {task_id or 'task'}: {e}")
            return SubtaskResult(id=task_id, success=False, error=str(e)), Usage()

        if definitions and self.tools is not None and response.has_tool_calls:
            output = await self._run_tool_calls(self.tools, response)
        else:
            output = response.content

        return SubtaskResult(id=task_id, success=True, output=output), response.usage

    async def _run_tool_calls(
        self, registry: ToolRegistry, response: ChatResponse
    ) -> str:
        outputs: list[str] = []
        for call in response.tool_calls:
            tool = registry.get(call.name)
            if tool is None:
                logger.debug(f"Worker {self.name} requested unknown tool {call.name}")
                continue
            try:
                result = await tool.execute(call.arguments)
            except Exception as e:
                outputs.append(f"{call.name} error: {e}")
            else:
                outputs.append(f"{call.name}: {result}")
        return "\n".join(outputs)


def general_worker(
    chat: ChatClient | None = None, tools: ToolRegistry | None = None
) -> WorkerAgent:
    return WorkerAgent(
        name="general",
        description="A general-purpose assistant for reasoning and simple tasks",
        system_prompt=GENERAL_WORKER_PROMPT,
        chat=chat,
        tools=tools,
    )


def calculator_worker(
    chat: ChatClient | None = None, tools: ToolRegistry | None = None
) -> WorkerAgent:
    return WorkerAgent(
        name="calculator",
        description="Specialized in mathematical computations",
        system_prompt=CALCULATOR_WORKER_PROMPT,
        tool_names=("calculator",),
        chat=chat,
        tools=tools,
    )


def researcher_worker(
    chat: ChatClient | None = None, tools: ToolRegistry | None = None
) -> WorkerAgent:
    return WorkerAgent(
        name="researcher",
        description="Specialized in information gathering and analysis",
        system_prompt=RESEARCHER_WORKER_PROMPT,
        chat=chat,
        tools=tools,
    )


def writer_worker(
    chat: ChatClient | None = None, tools: ToolRegistry | None = None
) -> WorkerAgent:
    return WorkerAgent(
        name="writer",
        description="Specialized in content creation and editing",
        system_prompt=WRITER_WORKER_PROMPT,
        chat=chat,
        tools=tools,
    )


def default_workers(
    chat: ChatClient | None = None, tools: ToolRegistry | None = None
) -> list[WorkerAgent]:
    """The built-in general, calculator, researcher and writer workers."""
    return [
        factory(chat, tools)
        for factory in (
            general_worker,
            calculator_worker,
            researcher_worker,
            writer_worker,
        )
    ]
