"""Shared pytest fixtures for the desccleaner test suite."""

from __future__ import annotations

import io
from typing import Iterator

import pytest

from desccleaner.config import WatchConfig
from desccleaner.telemetry.logger import CleanerLogger
from desccleaner.watch.memory import InMemoryContainer, InMemoryDocument
from desccleaner.watch.scheduler import ManualScheduler


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Provide a timer queue on a frozen clock, advanced explicitly by tests."""

    return ManualScheduler(clock=lambda: 0.0)


@pytest.fixture
def document() -> InMemoryDocument:
    """Provide an empty in-memory document."""

    return InMemoryDocument()


@pytest.fixture
def container(document: InMemoryDocument) -> InMemoryContainer:
    """Provide a list container mounted under the default list selector."""

    return document.mount(WatchConfig().list_selector, InMemoryContainer())


@pytest.fixture
def log_buffer() -> io.StringIO:
    """Provide an in-memory sink for cleaner log lines."""

    return io.StringIO()


@pytest.fixture
def cleaner_logger(log_buffer: io.StringIO) -> Iterator[CleanerLogger]:
    """Provide a logger writing to `log_buffer` at DEBUG level."""

    logger = CleanerLogger(sink=log_buffer, level="DEBUG")
    yield logger
    logger.close()
