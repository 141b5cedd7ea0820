"""Pipeline: send a payload through stages to a destination."""

from functools import reduce
from typing import Any, Callable, List, Optional

from ..config.schema import PipethroughConfig
from ..errors import StageResolutionError
from ..logging_config import get_logger
from .resolver import ImportResolver, StageResolver
from .stages import Stack, StageKind, StageSpec


def _identity(value: Any) -> Any:
    return value


class Pipeline:
    """
    Chain-of-responsibility runner.

    Stages receive the payload and a ``stack`` callable for the rest of the
    chain. A stage may change the payload, call ``stack`` to continue, or
    return without calling it to stop the chain::

        result = (
            Pipeline()
            .send(request)
            .through([authenticate, "myapp.stages.Throttle:60,1"])
            .then(dispatch)
        )

    A Pipeline is configured and run by one thread at a time.
    """

    def __init__(
        self,
        container: Optional[StageResolver] = None,
        *,
        config: Optional[PipethroughConfig] = None,
        result_handler: Optional[Callable[[Any], Any]] = None,
        name: str = "pipeline",
    ) -> None:
        self.name = name
        self.logger = get_logger(f"{__name__}.Pipeline.{name}")
        self.container: StageResolver = container if container is not None else ImportResolver()
        self.result_handler = result_handler or _identity

        settings = config.pipeline if config is not None else None
        self.method = settings.method if settings else "handle"
        self.trace = settings.trace if settings else False

        self.passable: Any = None
        self._pipes: List[Any] = []
        self._finally: Optional[Callable[[Any], Any]] = None

    def send(self, passable: Any) -> "Pipeline":
        """Set the payload sent through the pipeline."""
        self.passable = passable
        return self

    def through(self, *pipes: Any) -> "Pipeline":
        """Replace the stages, given as one list or as separate arguments."""
        self._pipes = self._normalize(pipes)
        return self

    def pipe(self, *pipes: Any) -> "Pipeline":
        """Append stages after the ones already configured."""
        self._pipes.extend(self._normalize(pipes))
        return self

    def via(self, method: str) -> "Pipeline":
        """Set the method called on resolved and instance stages."""
        self.method = method
        return self

    def finally_(self, callback: Callable[[Any], Any]) -> "Pipeline":
        """Set a callback run with the payload after every run, even a failed one."""
        self._finally = callback
        return self

    def set_container(self, container: StageResolver) -> "Pipeline":
        self.container = container
        return self

    def get_container(self) -> StageResolver:
        return self.container

    def then(self, destination: Callable[[Any], Any]) -> Any:
        """Run the pipeline with a final destination callback.

        Exceptions raised by stages or the destination reach the caller
        unchanged; the finally callback still runs exactly once.
        """
        pipes = self.pipes()
        pipeline = reduce(self.carry(), reversed(pipes), self.prepare_destination(destination))
        fields = {"pipeline": self.name, "stage_count": len(pipes)}

        self.logger.debug(f"Starting pipeline: {self.name}", extra={"extra_fields": fields})
        try:
            result = pipeline(self.passable)
        except Exception as e:
            # Callers own error reporting; stages may raise for control flow
            self.logger.debug(
                f"Pipeline failed: {self.name}",
                exc_info=True,
                extra={"extra_fields": {**fields, "error_type": type(e).__name__}},
            )
            raise
        finally:
            if self._finally is not None:
                self._finally(self.passable)

        self.logger.debug(f"Pipeline completed: {self.name}", extra={"extra_fields": fields})
        return result

    def then_return(self) -> Any:
        """Run the pipeline and return the resulting payload."""
        return self.then(_identity)

    def pipes(self) -> List[Any]:
        """Get the configured stages."""
        return list(self._pipes)

    def prepare_destination(self, destination: Callable[[Any], Any]) -> Stack:
        """Wrap the destination as the innermost link of the chain."""

        def run_destination(passable: Any) -> Any:
            return destination(passable)

        return run_destination

    def carry(self) -> Callable[[Stack, Any], Stack]:
        """Get the fold step wrapping one stage around the rest of the chain."""

        def wrap(stack: Stack, pipe: Any) -> Stack:
            spec = StageSpec.from_pipe(pipe)

            def run_stage(passable: Any) -> Any:
                carry = self.invoke(spec, passable, stack)
                if self.trace:
                    self.logger.debug(
                        f"Stage returned: {spec.label}",
                        extra={
                            "extra_fields": {
                                "pipeline": self.name,
                                "stage": spec.label,
                                "kind": spec.kind.value,
                                "result_type": type(carry).__name__,
                            }
                        },
                    )
                return self.handle_carry(carry)

            return run_stage

        return wrap

    def invoke(self, spec: StageSpec, passable: Any, stack: Stack) -> Any:
        """Resolve a stage and call it with the payload and stack."""
        if spec.kind is StageKind.CALLABLE:
            return spec.pipe(passable, stack)

        if spec.kind is StageKind.IDENTIFIER:
            pipe = self.resolve(spec)
            parameters = [passable, stack, *spec.parameters]
        else:
            pipe = spec.pipe
            parameters = [passable, stack]

        if hasattr(pipe, self.method):
            return getattr(pipe, self.method)(*parameters)
        return pipe(*parameters)

    def resolve(self, spec: StageSpec) -> Any:
        """Resolve an identifier stage, falling back to the raw identifier."""
        try:
            return self.container.resolve(spec.name)
        except StageResolutionError as e:
            self.logger.debug(
                f"Unresolved stage '{spec.name}', using identifier as is",
                extra={"extra_fields": {"pipeline": self.name, "stage": spec.name, **e.context}},
            )
            return spec.pipe

    def handle_carry(self, carry: Any) -> Any:
        """Post-process each stage result before it flows back up the chain."""
        return self.result_handler(carry)

    @staticmethod
    def _normalize(pipes: tuple) -> List[Any]:
        # through([a, b]) and through(a, b) are equivalent
        if len(pipes) == 1 and isinstance(pipes[0], (list, tuple)):
            return list(pipes[0])
        return list(pipes)
