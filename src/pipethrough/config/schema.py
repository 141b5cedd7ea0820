"""Configuration schema definitions using Pydantic."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level"
    )
    format: Literal["simple", "detailed", "json"] = Field(
        default="json",
        description="Log format type"
    )
    file: str | None = Field(default=None, description="Optional log file path")

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize log level to uppercase for case-insensitive input."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('format', mode='before')
    @classmethod
    def normalize_format(cls, v: str) -> str:
        """Normalize format to lowercase for case-insensitive input."""
        if isinstance(v, str):
            return v.lower()
        return v


class PipelineSettings(BaseModel):
    """Defaults applied to every Pipeline built with this configuration."""

    model_config = ConfigDict(extra='forbid')

    method: str = Field(
        default="handle",
        min_length=1,
        description="Method called on resolved and instance stages"
    )
    trace: bool = Field(
        default=False,
        description="Log every stage result at DEBUG level"
    )

    @field_validator('method')
    @classmethod
    def strip_method(cls, v: str) -> str:
        v = v.strip()
        if not v.isidentifier():
            raise ValueError(f"method must be a valid attribute name, got {v!r}")
        return v


class PipethroughConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
