from orchard.config.loader import (
    find_config_file,
    generate_default_config,
    load_yaml_config,
)
from orchard.config.models import (
    AppConfig,
    EmbeddingModelConfig,
    EmbeddingsConfig,
    ModelConfig,
    OllamaConfig,
    OpenAIConfig,
    OrchestratorConfig,
    ProvidersConfig,
    RaptorConfig,
    VLLMConfig,
)

__all__ = [
    "Config",
    "AppConfig",
    "ModelConfig",
    "EmbeddingModelConfig",
    "EmbeddingsConfig",
    "OrchestratorConfig",
    "RaptorConfig",
    "OllamaConfig",
    "VLLMConfig",
    "OpenAIConfig",
    "ProvidersConfig",
    "find_config_file",
    "load_yaml_config",
    "generate_default_config",
    "set_config",
]


class ConfigProxy:
    """Proxy for the global configuration that allows runtime updates."""

    def __init__(self):
        config_path = find_config_file(None)
        if config_path:
            yaml_data = load_yaml_config(config_path)
            self._config = AppConfig.model_validate(yaml_data)
        else:
            self._config = AppConfig()

    def __getattr__(self, name):
        return getattr(self._config, name)

    def get(self) -> AppConfig:
        """Return the underlying configuration object."""
        return self._config

    def set(self, config: AppConfig) -> None:
        """Replace the current configuration."""
        self._config = config


Config = ConfigProxy()


def set_config(config: AppConfig) -> None:
    """Set the global configuration programmatically.

    This allows library users to configure orchard without a YAML file.

    Args:
        config: The AppConfig instance to use globally.

    Example:
        >>> from orchard.config import set_config, AppConfig
        >>> set_config(AppConfig(orchestrator={"max_workers": 2}))
    """
    Config.set(config)
