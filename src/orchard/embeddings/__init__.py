import os

from orchard.config import AppConfig, Config
from orchard.embeddings.base import Embedder, EmbeddingError
from orchard.embeddings.openai_compatible import OpenAICompatibleEmbedder

__all__ = ["Embedder", "EmbeddingError", "OpenAICompatibleEmbedder", "get_embedder"]


def get_embedder(config: AppConfig | None = None) -> Embedder:
    """
    Factory function to get the appropriate embedder based on the configuration.

    Args:
        config: Configuration to use. Defaults to global Config.

    Returns:
        An embedder instance configured according to the config.
    """
    if config is None:
        config = Config.get()

    embeddings = config.embeddings
    model = embeddings.model

    if model.provider == "ollama":
        base_url = model.base_url or config.providers.ollama.base_url
        api_key = None
    elif model.provider == "vllm":
        base_url = model.base_url or config.providers.vllm.base_url
        api_key = None
    elif model.provider == "openai":
        base_url = model.base_url or config.providers.openai.base_url
        api_key = os.environ.get("OPENAI_API_KEY")
    else:
        raise ValueError(f"Unsupported embedding provider: {model.provider}")

    return OpenAICompatibleEmbedder(
        base_url=base_url,
        model=model.name,
        vector_dim=model.vector_dim,
        api_key=api_key,
        timeout=embeddings.timeout,
        batch_size=embeddings.batch_size,
    )
