import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from pydantic_graph.beta import Graph, GraphBuilder, StepContext
from pydantic_graph.beta.join import reduce_list_append

from orchard.agents.orchestrator.models import (
    FallbackPlan,
    OrchestrationError,
    PlanningError,
    RunCancelledError,
    Subtask,
    SubtaskResult,
    SynthesisError,
)
from orchard.agents.orchestrator.planning import (
    build_task_input,
    group_by_level,
    parse_plan,
)
from orchard.agents.orchestrator.prompts import (
    DEFAULT_EXECUTOR_PROMPT,
    ORCHESTRATOR_PROMPT,
    PLANNING_PROMPT,
    SYNTHESIS_PROMPT,
    SYNTHESIS_SYSTEM_PROMPT,
)
from orchard.agents.orchestrator.state import OrchestratorDeps, OrchestratorState
from orchard.llm.models import ChatMessage, Usage

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"


def build_orchestrator_graph() -> Graph[
    OrchestratorState, OrchestratorDeps, None, str
]:
    """Build the plan, execute and synthesize graph.

    Levels are handed out one at a time; the subtasks of a level are mapped
    onto parallel run_subtask steps, bounded by the deps semaphore, and
    joined before the next level starts.

    Steps never raise for planning, synthesis or cancellation failures.
    They store the error on the state and route to the end, and the caller
    raises it after the run.
    """
    g = GraphBuilder(
        state_type=OrchestratorState,
        deps_type=OrchestratorDeps,
        output_type=str,
    )

    @g.step
    async def plan(
        ctx: StepContext[OrchestratorState, OrchestratorDeps, None],
    ) -> None:
        state = ctx.state
        deps = ctx.deps
        config = deps.config

        planning_prompt = config.planning_prompt or PLANNING_PROMPT
        messages = [
            ChatMessage(
                role="system", content=config.system_prompt or ORCHESTRATOR_PROMPT
            ),
            *state.history,
            ChatMessage(role="user", content=planning_prompt.format(query=state.query)),
        ]

        logger.info(f"Creating plan for: {state.query[:50]}")
        try:
            completed, response = await _unless_cancelled(
                deps.chat.chat(messages, temperature=config.planning_temperature),
                deps.cancel_event,
            )
        except Exception as e:
            state.error = _chained(PlanningError(f"planning failed: {e}"), e)
            return
        if not completed or response is None:
            state.error = RunCancelledError()
            return

        state.usage = state.usage + response.usage
        outcome = parse_plan(response.content, state.query)
        if isinstance(outcome, FallbackPlan):
            logger.warning(f"Using single-task plan: {outcome.reason}")
        state.outcome = outcome
        state.levels = group_by_level(outcome.plan)
        logger.info(
            f"Plan has {len(outcome.plan.subtasks)} subtasks "
            f"in {len(state.levels)} levels"
        )

    @g.step
    async def next_level(
        ctx: StepContext[
            OrchestratorState, OrchestratorDeps, list[SubtaskResult] | None
        ],
    ) -> list[Subtask] | None:
        """Hand out the next dependency level, or None when execution is over."""
        state = ctx.state
        deps = ctx.deps

        if state.error is not None or state.next_level >= len(state.levels):
            return None

        if deps.cancelled:
            for level in state.levels[state.next_level :]:
                for task in level:
                    state.record(_cancelled(task), Usage())
            state.next_level = len(state.levels)
            return None

        level = state.levels[state.next_level]
        logger.debug(f"Running level {state.next_level} with {len(level)} subtasks")
        state.next_level += 1
        return list(level)

    @g.step
    async def run_subtask(
        ctx: StepContext[OrchestratorState, OrchestratorDeps, Subtask],
    ) -> SubtaskResult:
        state = ctx.state
        deps = ctx.deps
        task = ctx.inputs

        if deps.semaphore is None:
            deps.semaphore = asyncio.Semaphore(deps.config.max_workers)

        async with deps.semaphore:
            if deps.cancelled:
                result, usage = _cancelled(task), Usage()
            else:
                dependencies = (
                    state.outcome.plan.dependencies if state.outcome else {}
                )
                task_input = build_task_input(
                    task,
                    dependencies,
                    state.results,
                    deps.config.context_excerpt_chars,
                )
                result, usage = await _execute_subtask(deps, task, task_input)

        state.record(result, usage)
        return result

    @g.step
    async def synthesize(
        ctx: StepContext[OrchestratorState, OrchestratorDeps, None],
    ) -> str:
        state = ctx.state
        deps = ctx.deps

        if state.error is not None:
            return ""

        results = state.ordered_results()
        if deps.cancelled:
            state.error = RunCancelledError(results)
            return ""

        logger.info(f"Synthesizing {len(results)} results")
        formatted = "".join(
            f"[{'✓' if r.success else '✗'}] {r.id}: {r.output}\n\n" for r in results
        )
        synthesis_prompt = deps.config.synthesis_prompt or SYNTHESIS_PROMPT
        messages = [
            ChatMessage(role="system", content=SYNTHESIS_SYSTEM_PROMPT),
            ChatMessage(
                role="user",
                content=synthesis_prompt.format(query=state.query, results=formatted),
            ),
        ]

        try:
            completed, response = await _unless_cancelled(
                deps.chat.chat(messages), deps.cancel_event
            )
        except Exception as e:
            state.error = _chained(SynthesisError(f"synthesis failed: {e}"), e)
            return ""
        if not completed or response is None:
            state.error = RunCancelledError(results)
            return ""

        state.usage = state.usage + response.usage
        return response.content

    collect_results = g.join(
        reduce_list_append,
        initial_factory=list[SubtaskResult],
    )

    g.add(
        g.edge_from(g.start_node).to(plan),
        g.edge_from(plan).to(next_level),
    )

    g.add(
        g.edge_from(next_level).to(
            g.decision()
            .branch(g.match(list).label("Run level").map().to(run_subtask))
            .branch(g.match(type(None)).label("Execution done").to(synthesize))
        ),
        g.edge_from(run_subtask).to(collect_results),
        g.edge_from(collect_results).to(next_level),
        g.edge_from(synthesize).to(g.end_node),
    )

    return g.build()


T = TypeVar("T")


async def _unless_cancelled(
    awaitable: Awaitable[T], cancel_event: asyncio.Event | None
) -> tuple[bool, T | None]:
    """Await a call, abandoning it if the cancel event fires first.

    Returns (True, value) on completion, (False, None) when cancelled.
    """
    if cancel_event is None:
        return True, await awaitable
    if cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        return False, None

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not work.done():
            work.cancel()
            await asyncio.gather(work, return_exceptions=True)

    if work.cancelled():
        return False, None
    return True, work.result()


async def _execute_subtask(
    deps: OrchestratorDeps, task: Subtask, task_input: str
) -> tuple[SubtaskResult, Usage]:
    started = time.perf_counter()
    try:
        completed, outcome = await _unless_cancelled(
            _dispatch(deps, task, task_input), deps.cancel_event
        )
    except Exception as e:
        outcome = (SubtaskResult(id=task.id, success=False, error=str(e)), Usage())
        completed = True

    if not completed or outcome is None:
        result, usage = _cancelled(task), Usage()
    else:
        result, usage = outcome
    result = result.model_copy(
        update={"id": task.id, "duration": time.perf_counter() - started}
    )
    if not result.success:
        logger.warning(f"Subtask {task.id} failed: {result.error}")
    return result, usage


async def _dispatch(
    deps: OrchestratorDeps, task: Subtask, task_input: str
) -> tuple[SubtaskResult, Usage]:
    worker = deps.workers.get(task.worker_type) or deps.workers.get("general")
    if worker is None:
        return await _execute_default(deps, task, task_input)
    return await worker.execute(task_input, task_id=task.id)


async def _execute_default(
    deps: OrchestratorDeps, task: Subtask, task_input: str
) -> tuple[SubtaskResult, Usage]:
    messages = [
        ChatMessage(role="system", content=DEFAULT_EXECUTOR_PROMPT),
        ChatMessage(role="user", content=task_input),
    ]
    try:
        response = await deps.chat.chat(messages)
    except Exception as e:
        return SubtaskResult(id=task.id, success=False, error=str(e)), Usage()
    return (
        SubtaskResult(id=task.id, success=True, output=response.content),
        response.usage,
    )


def _cancelled(task: Subtask) -> SubtaskResult:
    return SubtaskResult(id=task.id, success=False, error=CANCELLED)


def _chained(error: OrchestrationError, cause: Exception) -> OrchestrationError:
    error.__cause__ = cause
    return error
