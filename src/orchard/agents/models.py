from typing import Any, Literal

from pydantic import BaseModel, Field

from orchard.llm.models import Usage

StepType = Literal["planning", "observation", "error", "synthesis"]


class Step(BaseModel):
    """One entry in an agent's reasoning trail."""

    type: StepType
    content: str = ""
    tool_name: str | None = None
    tool_input: str | None = None
    tool_output: str | None = None


class AgentResponse(BaseModel):
    output: str
    steps: list[Step] = []
    usage: Usage = Field(default_factory=Usage)
    metadata: dict[str, Any] = {}
