from orchard.agents.models import AgentResponse, Step

__all__ = ["AgentResponse", "Step"]
