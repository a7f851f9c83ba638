from __future__ import annotations

from typing import Any

import pytest
from loguru import logger

from notification_worker.app.core import SERVICE_NAME
from notification_worker.app.observability import ObservabilityContext
from tests.fakes import RecordingMetrics


@pytest.fixture()
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture()
def observability(metrics: RecordingMetrics) -> ObservabilityContext:
    return ObservabilityContext(log=logger.bind(service_name=SERVICE_NAME), metrics=metrics)


@pytest.fixture()
def log_records() -> Any:
    """Captures loguru records emitted during the test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
