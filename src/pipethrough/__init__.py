"""Send a payload through a chain of stages to a destination."""

from .errors import ConfigurationError, PipelineError, PipethroughError, StageResolutionError
from .pipeline import (
    ImportResolver,
    Pipeline,
    RegistryResolver,
    StageKind,
    StageResolver,
    StageSpec,
    parse_pipe_string,
)

__version__ = "0.1.0"

__all__ = [
    "Pipeline",
    "ImportResolver",
    "RegistryResolver",
    "StageResolver",
    "StageKind",
    "StageSpec",
    "parse_pipe_string",
    "PipethroughError",
    "ConfigurationError",
    "StageResolutionError",
    "PipelineError",
]
