from orchard.agents.models import AgentResponse, Step
from orchard.agents.orchestrator import TaskOrchestrator, WorkerAgent
from orchard.config import AppConfig, Config, set_config
from orchard.raptor import RaptorStore, SimpleSummarizer
from orchard.store import Document, MemoryVectorStore, SearchResult

__all__ = [
    "AgentResponse",
    "AppConfig",
    "Config",
    "Document",
    "MemoryVectorStore",
    "RaptorStore",
    "SearchResult",
    "SimpleSummarizer",
    "Step",
    "TaskOrchestrator",
    "WorkerAgent",
    "set_config",
]
