import logging
from typing import Protocol, runtime_checkable

from pydantic_ai import Agent

from orchard.config import AppConfig, Config, ModelConfig
from orchard.raptor.prompts import CLUSTER_SUMMARY_PROMPT
from orchard.utils import get_model

logger = logging.getLogger(__name__)


@runtime_checkable
class Summarizer(Protocol):
    async def summarize(self, texts: list[str]) -> str: ...


class SimpleSummarizer:
    """Summarizes by truncating each text and joining the pieces.

    Needs no model, so it works as the default and as a test double.
    """

    separator = " | "
    budget = 200
    min_per_text = 50

    async def summarize(self, texts: list[str]) -> str:
        if not texts:
            return ""
        per_text = max(self.min_per_text, self.budget // len(texts))
        return self.separator.join(
            text if len(text) <= per_text else text[:per_text] + "..."
            for text in texts
        )


class ClusterSummarizer:
    """Summarizes clusters of texts with an LLM for RAPTOR tree building."""

    def __init__(
        self,
        config: AppConfig | None = None,
        model_config: ModelConfig | None = None,
    ):
        """Initialize the summarizer.

        Args:
            config: Application configuration. Defaults to global Config.
            model_config: Optional model config override. If None, uses
                         config.raptor.model or falls back to
                         config.orchestrator.model
        """
        self._config = config or Config.get()

        if model_config is not None:
            effective_model = model_config
        elif self._config.raptor.model is not None:
            effective_model = self._config.raptor.model
        else:
            effective_model = self._config.orchestrator.model

        model = get_model(effective_model, self._config)
        self._agent: Agent[None, str] = Agent(
            model=model,
            output_type=str,
            retries=2,
        )

    async def summarize(self, texts: list[str]) -> str:
        """Summarize a cluster of texts.

        Args:
            texts: Texts to summarize

        Returns:
            A summary of the combined texts

        Raises:
            ValueError: If texts is empty
        """
        if not texts:
            raise ValueError("Cannot summarize empty list of texts")

        grouped = "\n\n---\n\n".join(
            f"Text {i + 1}:\n{text}" for i, text in enumerate(texts)
        )
        prompt = CLUSTER_SUMMARY_PROMPT.format(count=len(texts), texts=grouped)

        result = await self._agent.run(prompt)
        return result.output


def fallback_summary(texts: list[str], limit: int) -> str:
    """Join texts with blank lines, cut to limit characters plus "..."."""
    joined = "\n\n".join(texts)
    if len(joined) > limit:
        return joined[:limit] + "..."
    return joined
