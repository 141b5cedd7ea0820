"""CLI command for running a pipeline of importable stages."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .config import ConfigLoader, PipethroughConfig
from .errors import PipelineError
from .logging_config import LogContext, setup_logging
from .pipeline import ImportResolver, Pipeline

APP_NAME = "pipethrough"


def parse_payload(raw: str) -> Any:
    """Decode the payload as JSON, keeping it as plain text otherwise."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def format_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result)
    except (TypeError, ValueError):
        return repr(result)


def run_command(
    config: PipethroughConfig,
    payload: Any,
    stages: List[str],
    method_override: Optional[str] = None,
) -> int:
    """Send the payload through the stages and print the result.

    Args:
        config: Configuration object
        payload: Decoded payload
        stages: Stage identifiers, e.g. ``myapp.stages.Throttle:60,1``
        method_override: Optional override for the stage method name

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__package__ or __name__)

    try:
        if not stages:
            raise PipelineError("At least one --through stage is required")

        pipeline = Pipeline(ImportResolver(), config=config, name="cli")
        if method_override:
            pipeline.via(method_override)

        with LogContext(logger, command="run"):
            logger.info(f"Running {len(stages)} stage(s) via '{pipeline.method}'")
            result = pipeline.send(payload).through(stages).then_return()

        print(format_result(result))
        return 0

    except Exception as e:
        logger.exception(f"Pipeline run failed: {e}")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the pipethrough command."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Send a payload through a chain of importable stages"
    )
    parser.add_argument(
        "payload",
        help="Payload sent through the pipeline (parsed as JSON when possible)"
    )
    parser.add_argument(
        "--through",
        dest="stages",
        action="append",
        default=[],
        metavar="STAGE",
        help="Stage as module.path.Name or module.path.Name:arg1,arg2 (repeatable, runs in order)"
    )
    parser.add_argument(
        "--via",
        required=False,
        help="Method called on stage objects (overrides config)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)"
    )

    args = parser.parse_args(argv)

    loader = ConfigLoader(app_name=APP_NAME, config_class=PipethroughConfig)
    config = loader.load(defaults_path=args.config)

    log_file = Path(config.logging.file) if config.logging.file else None
    setup_logging(
        level=args.log_level or config.logging.level,
        format=config.logging.format,
        log_file=log_file,
    )

    return run_command(
        config=config,
        payload=parse_payload(args.payload),
        stages=args.stages,
        method_override=args.via,
    )


if __name__ == "__main__":
    sys.exit(main())
