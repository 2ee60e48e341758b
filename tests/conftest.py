"""Shared fixtures for trace-anything tests.

Every test gets its own engine, so identity counters and the shim registry
never leak between tests, and a config whose sink collects records in a list.
"""

from __future__ import annotations

import pytest

from trace_anything.config import TraceConfig, resolve_config
from trace_anything.engine import TraceEngine
from trace_anything.telemetry.models import TraceLog


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


# ---------------------------------------------------------------------------
# Engine and sink
# ---------------------------------------------------------------------------


@pytest.fixture
def records() -> list[TraceLog]:
    """Records received by the collecting sink."""
    return []


@pytest.fixture
def engine() -> TraceEngine:
    """Fresh engine, isolated from the process default."""
    return TraceEngine()


@pytest.fixture
def config(records: list[TraceLog]) -> TraceConfig:
    """Default options with a sink appending to records."""
    return resolve_config(logger=records.append)
