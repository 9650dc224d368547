from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class Subtask(BaseModel):
    """A single unit of work in a plan.

    Attributes:
        id: Identifier, unique within the plan
        description: What this subtask accomplishes
        worker_type: Name of the worker that should run it
        input: Prompt handed to the worker; defaults to the description
    """

    model_config = ConfigDict(frozen=True)

    id: str
    description: str = ""
    worker_type: str = "general"
    input: str = ""

    @model_validator(mode="before")
    @classmethod
    def _defaults(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if data.get("id") is not None:
                data["id"] = str(data["id"])
            if not data.get("worker_type"):
                data["worker_type"] = "general"
            if not data.get("input"):
                data["input"] = data.get("description") or ""
        return data


class TaskPlan(BaseModel):
    analysis: str = ""
    subtasks: list[Subtask] = []
    dependencies: dict[str, list[str]] = {}

    @field_validator("dependencies", mode="before")
    @classmethod
    def _normalize_dependencies(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            normalized: dict[str, list[str]] = {}
            for task_id, deps in value.items():
                if deps is None:
                    deps = []
                elif isinstance(deps, str):
                    deps = [deps]
                elif not isinstance(deps, list):
                    raise ValueError(
                        f"dependencies of {task_id!r} must be a list of ids, "
                        f"got {type(deps).__name__}"
                    )
                normalized[str(task_id)] = [str(d) for d in deps]
            return normalized
        return value

    def subtask_ids(self) -> list[str]:
        return [task.id for task in self.subtasks]


class SubtaskResult(BaseModel):
    id: str = ""
    success: bool
    output: str = ""
    error: str | None = None
    duration: float = 0.0


@dataclass(frozen=True)
class ParsedPlan:
    plan: TaskPlan


@dataclass(frozen=True)
class FallbackPlan:
    """Single-task plan used when the planner's output is unusable."""

    plan: TaskPlan
    reason: str


PlanOutcome = ParsedPlan | FallbackPlan


class OrchestrationError(Exception):
    """Base class for errors that abort an orchestrator run."""


class PlanningError(OrchestrationError):
    pass


class SynthesisError(OrchestrationError):
    pass


class RunCancelledError(OrchestrationError):
    """The caller cancelled the run before synthesis.

    Attributes:
        results: Subtask results recorded so far, cancelled ones included
    """

    def __init__(self, results: list[SubtaskResult] | None = None):
        super().__init__("orchestrator run cancelled")
        self.results = results or []
