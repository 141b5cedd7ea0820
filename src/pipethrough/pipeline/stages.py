"""Stage specifications.

A stage ("pipe") can be given to a pipeline in three forms:

- a callable, invoked as ``pipe(payload, stack)``
- an identifier string ``"name"`` or ``"name:arg1,arg2"``, resolved by name
  and invoked with the parsed arguments appended
- an already built object, invoked through its handler method
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Tuple

# stack(payload) -> result
Stack = Callable[[Any], Any]


class StageKind(str, Enum):
    """How a stage is resolved and invoked."""

    CALLABLE = "callable"
    IDENTIFIER = "identifier"
    INSTANCE = "instance"


def parse_pipe_string(pipe: str) -> Tuple[str, List[str]]:
    """
    Split an identifier into its name and parameters.

    Only the first ``:`` is significant. Parameters are plain strings;
    no escaping is supported.

    Examples:
        >>> parse_pipe_string("throttle:60,1")
        ('throttle', ['60', '1'])
        >>> parse_pipe_string("auth")
        ('auth', [])
    """
    name, sep, parameters = pipe.partition(":")
    if not sep:
        return name, []
    return name, parameters.split(",")


@dataclass(frozen=True)
class StageSpec:
    """A stage classified once, before it is invoked."""

    kind: StageKind
    pipe: Any
    name: str | None = None
    parameters: List[str] = field(default_factory=list)

    @classmethod
    def from_pipe(cls, pipe: Any) -> "StageSpec":
        """Classify a raw stage value.

        Callables win over everything else, so an object defining
        ``__call__`` is called directly rather than through its handler.
        """
        if callable(pipe):
            return cls(StageKind.CALLABLE, pipe)
        if isinstance(pipe, str):
            name, parameters = parse_pipe_string(pipe)
            return cls(StageKind.IDENTIFIER, pipe, name=name, parameters=parameters)
        return cls(StageKind.INSTANCE, pipe)

    @property
    def label(self) -> str:
        """Short description used in log records."""
        if self.kind is StageKind.IDENTIFIER:
            return self.name
        return getattr(self.pipe, "__qualname__", type(self.pipe).__qualname__)
