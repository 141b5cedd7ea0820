"""Resolvers turning stage names into invokable instances.

A resolver is the pipeline's container: anything with a ``resolve(name)``
method works. Resolvers raise StageResolutionError when a name is unknown;
the pipeline then falls back to the raw identifier.
"""

import importlib
import logging
from typing import Any, Callable, Dict, Protocol, runtime_checkable

from ..errors import StageResolutionError

logger = logging.getLogger(__name__)


@runtime_checkable
class StageResolver(Protocol):
    """Produces a stage instance for a name."""

    def resolve(self, name: str) -> Any:  # pragma: no cover - interface only
        ...


class RegistryResolver:
    """In-memory container of named stages.

    Factories registered with ``bind`` build a fresh instance on every
    resolution; objects registered with ``instance`` are shared.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._instances: Dict[str, Any] = {}

    def bind(self, name: str, factory: Callable[[], Any]) -> "RegistryResolver":
        self._instances.pop(name, None)
        self._factories[name] = factory
        return self

    def instance(self, name: str, obj: Any) -> "RegistryResolver":
        self._factories.pop(name, None)
        self._instances[name] = obj
        return self

    def has(self, name: str) -> bool:
        return name in self._instances or name in self._factories

    def resolve(self, name: str) -> Any:
        if name in self._instances:
            return self._instances[name]
        if name in self._factories:
            return self._factories[name]()
        raise StageResolutionError(f"No stage registered as '{name}'", name=name)


class ImportResolver:
    """Resolves dotted paths such as ``myapp.stages.Authenticate``.

    Classes are instantiated without arguments; functions and other module
    attributes are returned unchanged. Only lookup failures are reported as
    StageResolutionError, errors raised by a constructor propagate.
    """

    def resolve(self, name: str) -> Any:
        module_name, _, attr = name.rpartition(".")
        # Relative paths (".stages.Auth") and empty segments ("a..Auth") are not importable
        if not attr or "" in module_name.split("."):
            raise StageResolutionError(f"'{name}' is not a dotted import path", name=name)

        try:
            module = importlib.import_module(module_name)
        except (ImportError, ValueError) as e:
            raise StageResolutionError(
                f"Cannot import module '{module_name}'", name=name, error=str(e)
            ) from e

        try:
            target = getattr(module, attr)
        except AttributeError as e:
            raise StageResolutionError(
                f"Module '{module_name}' has no attribute '{attr}'", name=name
            ) from e

        if isinstance(target, type):
            logger.debug(f"Instantiating stage class {name}")
            return target()
        return target
