"""Configuration management."""

from .loader import ConfigLoader, get_config, reload_config
from .schema import LoggingConfig, PipelineSettings, PipethroughConfig

__all__ = [
    "ConfigLoader",
    "get_config",
    "reload_config",
    "LoggingConfig",
    "PipelineSettings",
    "PipethroughConfig",
]
