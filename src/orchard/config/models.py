import os

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """Configuration for a language model.

    Attributes:
        provider: Model provider (ollama, openai, anthropic, vllm, ...)
        name: Model name/identifier
        base_url: Optional base URL for OpenAI-compatible servers (vLLM, LM Studio, etc.)
        temperature: Sampling temperature (0.0 to 1.0+)
        max_tokens: Maximum tokens to generate
    """

    provider: str = "ollama"
    name: str = "gpt-oss"
    base_url: str | None = None

    temperature: float | None = None
    max_tokens: int | None = None


class EmbeddingModelConfig(BaseModel):
    """Configuration for an embedding model.

    Attributes:
        provider: Model provider (ollama, openai, vllm)
        name: Model name/identifier
        vector_dim: Vector dimensions produced by the model
        base_url: Optional base URL for OpenAI-compatible servers
    """

    provider: str = "ollama"
    name: str = "qwen3-embedding:4b"
    vector_dim: int = 2560
    base_url: str | None = None


class EmbeddingsConfig(BaseModel):
    model: EmbeddingModelConfig = Field(default_factory=EmbeddingModelConfig)
    batch_size: int = Field(default=64, ge=1)
    timeout: int = 60


class OrchestratorConfig(BaseModel):
    model: ModelConfig = Field(default_factory=ModelConfig)
    max_workers: int = Field(default=5, ge=1)
    planning_temperature: float = 0.3
    # Characters of a dependency's output forwarded to dependent subtasks.
    context_excerpt_chars: int = Field(default=200, ge=4)

    # None selects the built-in prompts.
    system_prompt: str | None = None
    planning_prompt: str | None = None
    synthesis_prompt: str | None = None


class RaptorConfig(BaseModel):
    """Tree construction and search settings.

    Attributes:
        max_levels: Maximum number of summary levels above the leaves
        cluster_size: Target number of nodes per cluster
        similarity_threshold: Minimum cosine similarity for cluster membership
            and for descending into a node's children during search
        max_children_per_node: Hard cap on cluster size
        context_score_factor: Score multiplier for parent context results
        fallback_summary_chars: Length cap of the concatenation used when
            summarization fails
        model: Model for LLM cluster summaries (falls back to the orchestrator model)
    """

    max_levels: int = Field(default=3, ge=1)
    cluster_size: int = Field(default=5, ge=1)
    similarity_threshold: float = Field(default=0.7, gt=0.0, le=1.0)
    max_children_per_node: int = Field(default=10, ge=1)
    context_score_factor: float = Field(default=0.8, ge=0.0)
    fallback_summary_chars: int = Field(default=500, ge=1)
    model: ModelConfig | None = None

    @property
    def effective_cluster_size(self) -> int:
        return min(self.cluster_size, self.max_children_per_node)


class OllamaConfig(BaseModel):
    base_url: str = Field(
        default_factory=lambda: os.environ.get(
            "OLLAMA_BASE_URL", "http://localhost:11434"
        )
    )


class VLLMConfig(BaseModel):
    base_url: str = "http://localhost:8000"


class OpenAIConfig(BaseModel):
    base_url: str = "https://api.openai.com"


class ProvidersConfig(BaseModel):
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    vllm: VLLMConfig = Field(default_factory=VLLMConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)


class AppConfig(BaseModel):
    environment: str = "production"
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    raptor: RaptorConfig = Field(default_factory=RaptorConfig)
    embeddings: EmbeddingsConfig = Field(default_factory=EmbeddingsConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
