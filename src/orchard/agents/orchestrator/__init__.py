from orchard.agents.orchestrator.graph import build_orchestrator_graph
from orchard.agents.orchestrator.models import (
    FallbackPlan,
    OrchestrationError,
    ParsedPlan,
    PlanningError,
    RunCancelledError,
    Subtask,
    SubtaskResult,
    SynthesisError,
    TaskPlan,
)
from orchard.agents.orchestrator.orchestrator import TaskOrchestrator
from orchard.agents.orchestrator.planning import (
    build_task_input,
    group_by_level,
    parse_plan,
)
from orchard.agents.orchestrator.state import OrchestratorDeps, OrchestratorState
from orchard.agents.orchestrator.workers import WorkerAgent, default_workers

__all__ = [
    "FallbackPlan",
    "OrchestrationError",
    "OrchestratorDeps",
    "OrchestratorState",
    "ParsedPlan",
    "PlanningError",
    "RunCancelledError",
    "Subtask",
    "SubtaskResult",
    "SynthesisError",
    "TaskOrchestrator",
    "TaskPlan",
    "WorkerAgent",
    "build_orchestrator_graph",
    "build_task_input",
    "default_workers",
    "group_by_level",
    "parse_plan",
]
