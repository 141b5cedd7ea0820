"""Pipeline composition: stages wrapped around a destination."""

from .base import Pipeline
from .resolver import ImportResolver, RegistryResolver, StageResolver
from .stages import Stack, StageKind, StageSpec, parse_pipe_string

__all__ = [
    "Pipeline",
    "ImportResolver",
    "RegistryResolver",
    "StageResolver",
    "Stack",
    "StageKind",
    "StageSpec",
    "parse_pipe_string",
]
