import argparse
import asyncio
import os
import signal
import sys
from typing import Any, Sequence

from loguru import logger

from notification_worker.app.composition import create_worker_dependencies
from notification_worker.app.config.settings import Settings, load_settings
from notification_worker.app.constants import LoopState
from notification_worker.app.core import SERVICE_NAME
from notification_worker.app.domain.errors import ConfigError, ConnectivityError
from notification_worker.app.observability import configure_logging

APP_VERSION = "1.0.0"
DEFAULT_CONFIG_PATH = "configs/config.yaml"


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _default_config_path() -> str | None:
    env_path = os.environ.get("CONFIG_PATH")
    if env_path:
        return env_path
    if os.path.isfile(DEFAULT_CONFIG_PATH):
        return DEFAULT_CONFIG_PATH
    return None


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="notification-worker")
    parser.add_argument(
        "--config",
        default=_default_config_path(),
        help=(
            f"path to a YAML configuration file (default: $CONFIG_PATH, then {DEFAULT_CONFIG_PATH} "
            "if present; environment variables only otherwise)"
        ),
    )
    return parser.parse_args(argv)


async def run_worker(settings: Settings) -> int:
    _log(
        "application_starting",
        version=APP_VERSION,
        rabbitmq_host=settings.rabbitmq_host,
        rabbitmq_port=settings.rabbitmq_port,
        rabbitmq_queue=settings.rabbitmq_queue,
        api_url=settings.api_url,
        metrics_port=settings.server_port,
    )

    deps = create_worker_dependencies(settings)
    cancel_event = asyncio.Event()

    def request_shutdown() -> None:
        if not cancel_event.is_set():
            _log("shutdown_signal")
            cancel_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown)
        except NotImplementedError:
            pass

    exit_code = 0
    try:
        await deps.start_status_server()
        outcome = await deps.engine.start(cancel_event)
        if outcome is LoopState.CANCELLED:
            _log("worker_stopped_gracefully")
    except ConnectivityError as exc:
        logger.bind(service_name=SERVICE_NAME, event="worker_failed").error("worker stopped with error: {}", exc)
        exit_code = 1
    finally:
        await deps.close()
        _log("application_shutdown_complete")
    return exit_code


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"failed to load config: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.logging_level, settings.logging_format)
    try:
        exit_code = asyncio.run(run_worker(settings))
    except KeyboardInterrupt:
        _log("worker_interrupted")
        exit_code = 0
    except Exception as e:
        logger.exception("worker failed: {}", e)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
