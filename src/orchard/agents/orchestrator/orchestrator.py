import asyncio
from collections.abc import Iterable

from orchard.agents.models import AgentResponse, Step
from orchard.agents.orchestrator.graph import build_orchestrator_graph
from orchard.agents.orchestrator.models import FallbackPlan, PlanningError
from orchard.agents.orchestrator.state import OrchestratorDeps, OrchestratorState
from orchard.agents.orchestrator.workers import WorkerAgent, default_workers
from orchard.config import AppConfig, Config, OrchestratorConfig
from orchard.llm.client import ChatClient, PydanticAIChatClient
from orchard.llm.models import ChatMessage
from orchard.tools.calculator import CalculatorTool
from orchard.tools.registry import ToolRegistry


class TaskOrchestrator:
    """Runs a request as a plan of subtasks executed by workers.

    A planning call decomposes the request, subtasks run level by level
    with at most max_workers in flight, and a synthesis call merges the
    results into the final answer. The flow itself is the graph built by
    build_orchestrator_graph.
    """

    def __init__(
        self,
        chat: ChatClient,
        tools: ToolRegistry | None = None,
        workers: Iterable[WorkerAgent] = (),
        config: OrchestratorConfig | None = None,
    ):
        self._chat = chat
        self._config = config or OrchestratorConfig()
        self._workers: dict[str, WorkerAgent] = {}
        for worker in workers:
            if worker.chat is None:
                worker = worker.with_capabilities(chat, tools)
            self._workers[worker.name] = worker
        self._graph = build_orchestrator_graph()

    @classmethod
    def from_config(cls, config: AppConfig | None = None) -> "TaskOrchestrator":
        """Build an orchestrator with the configured model and built-in workers."""
        config = config or Config.get()
        chat = PydanticAIChatClient.from_config(config.orchestrator.model, config)
        tools = ToolRegistry([CalculatorTool()])
        return cls(chat, tools, default_workers(chat, tools), config.orchestrator)

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    def list_workers(self) -> list[WorkerAgent]:
        return list(self._workers.values())

    async def run(
        self, query: str, cancel_event: asyncio.Event | None = None
    ) -> AgentResponse:
        return await self.run_with_history([], query, cancel_event)

    async def run_with_history(
        self,
        history: list[ChatMessage],
        query: str,
        cancel_event: asyncio.Event | None = None,
    ) -> AgentResponse:
        """Plan, execute and synthesize a response to query.

        Raises:
            PlanningError: The planning call failed.
            SynthesisError: The synthesis call failed.
            RunCancelledError: cancel_event was set before synthesis finished.
        """
        state = OrchestratorState(query=query, history=list(history))
        deps = OrchestratorDeps(
            chat=self._chat,
            config=self._config,
            workers=self._workers,
            cancel_event=cancel_event,
        )

        synthesis = await self._graph.run(state=state, deps=deps)
        if state.error is not None:
            raise state.error
        if state.outcome is None:
            raise PlanningError("planning produced no plan")

        plan = state.outcome.plan
        results = state.ordered_results()
        steps = [Step(type="planning", content=plan.analysis)]
        for result in results:
            if result.success:
                steps.append(
                    Step(
                        type="observation",
                        tool_name=result.id,
                        tool_output=result.output,
                    )
                )
            else:
                steps.append(
                    Step(
                        type="error",
                        content=result.error or "",
                        tool_name=result.id,
                        tool_output=result.output,
                    )
                )
        steps.append(Step(type="synthesis", content=synthesis))

        return AgentResponse(
            output=synthesis,
            steps=steps,
            usage=state.usage,
            metadata={
                "plan": plan.model_dump(),
                "levels": [[task.id for task in level] for level in state.levels],
                "fallback_plan": isinstance(state.outcome, FallbackPlan),
                "results": [result.model_dump() for result in results],
            },
        )
