"""Error definitions for pipethrough."""

from typing import Any, Dict


class PipethroughError(Exception):
    """Base exception for all pipethrough errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class ConfigurationError(PipethroughError):
    """Configuration is invalid or missing."""
    pass


class StageResolutionError(PipethroughError):
    """A stage name could not be resolved to an instance."""
    pass


class PipelineError(PipethroughError):
    """Pipeline could not be set up or run."""
    pass
