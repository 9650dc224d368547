import logging
from collections.abc import Mapping

from pydantic import ValidationError

from orchard.agents.orchestrator.models import (
    FallbackPlan,
    ParsedPlan,
    PlanOutcome,
    Subtask,
    SubtaskResult,
    TaskPlan,
)
from orchard.utils import parse_json_object, truncate

logger = logging.getLogger(__name__)

FALLBACK_ANALYSIS = "Direct execution"
CONTEXT_HEADER = "\n\nContext from previous tasks:\n"


def fallback_plan(query: str, reason: str) -> FallbackPlan:
    return FallbackPlan(
        plan=TaskPlan(
            analysis=FALLBACK_ANALYSIS,
            subtasks=[
                Subtask(
                    id="task_1",
                    description=query,
                    worker_type="general",
                    input=query,
                )
            ],
        ),
        reason=reason,
    )


def parse_plan(content: str, query: str) -> PlanOutcome:
    """Parse the planner's reply into a plan.

    Any reply that does not hold a usable plan (no JSON object, a schema
    mismatch, or no subtasks) yields a FallbackPlan that runs the query as
    a single general task.
    """
    data = parse_json_object(content)
    if data is None:
        return fallback_plan(query, "no JSON object in reply")

    subtasks = data.get("subtasks")
    if isinstance(subtasks, list):
        # Models occasionally omit ids; number them by position.
        data["subtasks"] = [
            {**task, "id": f"task_{i + 1}"}
            if isinstance(task, dict) and not task.get("id")
            else task
            for i, task in enumerate(subtasks)
        ]

    try:
        plan = TaskPlan.model_validate(data)
    except ValidationError as e:
        return fallback_plan(query, f"invalid plan: {e.error_count()} errors")

    if not plan.subtasks:
        return fallback_plan(query, "plan has no subtasks")

    unique: dict[str, Subtask] = {}
    for task in plan.subtasks:
        if task.id in unique:
            logger.warning(f"Ignoring duplicate subtask id {task.id!r}")
            continue
        unique[task.id] = task
    if len(unique) != len(plan.subtasks):
        plan = plan.model_copy(update={"subtasks": list(unique.values())})

    return ParsedPlan(plan=plan)


def group_by_level(plan: TaskPlan) -> list[list[Subtask]]:
    """Group subtasks into levels that can run concurrently.

    A subtask lands in the first level after all of its dependencies.
    Dependencies on ids outside the plan are ignored. When no remaining
    subtask is ready (a cycle), all remaining subtasks form the final level.
    Subtasks keep plan order within each level.
    """
    if not plan.subtasks:
        return []

    known = set(plan.subtask_ids())
    deps = {
        task.id: set(plan.dependencies.get(task.id, ())) & known
        for task in plan.subtasks
    }

    levels: list[list[Subtask]] = []
    leveled: set[str] = set()

    while len(leveled) < len(plan.subtasks):
        pending = [task for task in plan.subtasks if task.id not in leveled]
        ready = [task for task in pending if deps[task.id] <= leveled]
        if not ready:
            logger.warning(
                f"Dependency cycle among {[t.id for t in pending]}, running them together"
            )
            ready = pending
        leveled.update(task.id for task in ready)
        levels.append(ready)

    return levels


def build_task_input(
    task: Subtask,
    dependencies: Mapping[str, list[str]],
    results: Mapping[str, SubtaskResult],
    excerpt_chars: int = 200,
) -> str:
    """Append excerpts of successful dependency outputs to a subtask's input."""
    task_deps = dependencies.get(task.id) or []
    if not task_deps:
        return task.input

    lines = [task.input, CONTEXT_HEADER]
    for dep_id in task_deps:
        result = results.get(dep_id)
        if result is not None and result.success:
            lines.append(f"- {dep_id}: {truncate(result.output, excerpt_chars)}\n")
    return "".join(lines)
