import asyncio
from dataclasses import dataclass, field

from orchard.agents.orchestrator.models import (
    OrchestrationError,
    PlanOutcome,
    Subtask,
    SubtaskResult,
)
from orchard.agents.orchestrator.workers import WorkerAgent
from orchard.config import OrchestratorConfig
from orchard.llm.client import ChatClient
from orchard.llm.models import ChatMessage, Usage


@dataclass
class OrchestratorDeps:
    chat: ChatClient
    config: OrchestratorConfig
    workers: dict[str, WorkerAgent] = field(default_factory=dict)
    cancel_event: asyncio.Event | None = None
    semaphore: asyncio.Semaphore | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()


@dataclass
class OrchestratorState:
    """Per-run state shared by the orchestrator graph steps.

    Attributes:
        query: The request being answered
        history: Earlier conversation sent along with the planning call
        outcome: Parsed or fallback plan, set by the plan step
        levels: Dependency levels of the plan, run in order
        next_level: Index of the next level to hand out
        results: Subtask results by id, in completion order
        usage: Token usage summed over every chat call of the run
        error: Error that ends the run; raised once the graph finishes
    """

    query: str
    history: list[ChatMessage] = field(default_factory=list)
    outcome: PlanOutcome | None = None
    levels: list[list[Subtask]] = field(default_factory=list)
    next_level: int = 0
    results: dict[str, SubtaskResult] = field(default_factory=dict)
    usage: Usage = field(default_factory=Usage)
    error: OrchestrationError | None = None

    def record(self, result: SubtaskResult, usage: Usage) -> None:
        self.results[result.id] = result
        self.usage = self.usage + usage

    def ordered_results(self) -> list[SubtaskResult]:
        """Recorded results in plan order."""
        if self.outcome is None:
            return []
        return [
            self.results[task_id]
            for task_id in self.outcome.plan.subtask_ids()
            if task_id in self.results
        ]
