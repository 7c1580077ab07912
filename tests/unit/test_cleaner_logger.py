"""Unit tests for structured cleaner event logging."""

from __future__ import annotations

import io

from desccleaner.telemetry.logger import CleanerLogger


def test_event_lines_are_deterministic_and_sorted() -> None:
    """Context keys should be sorted and values sanitized."""

    buffer = io.StringIO()
    logger = CleanerLogger(sink=buffer, level="DEBUG")
    try:
        logger.event("watch", "bound", selector="#list block", attempts=2, note="")
    finally:
        logger.close()

    assert buffer.getvalue().strip() == (
        "[cleaner] level=INFO stage=watch event=bound attempts=2 note=none selector=#list_block"
    )


def test_sink_level_filters_debug_events() -> None:
    """Events below the sink level should not be written."""

    buffer = io.StringIO()
    logger = CleanerLogger(sink=buffer, level="INFO")
    try:
        logger.event("watch", "bind_retry", level="DEBUG", attempt=1)
        logger.event("watch", "bind_gave_up", level="WARNING", attempts=3)
    finally:
        logger.close()

    lines = buffer.getvalue().splitlines()
    assert lines == ["[cleaner] level=WARNING stage=watch event=bind_gave_up attempts=3"]


def test_sinks_only_receive_their_own_logger_lines() -> None:
    """Two loggers with separate sinks should not see each other's events."""

    first_buffer = io.StringIO()
    second_buffer = io.StringIO()
    first = CleanerLogger(sink=first_buffer)
    second = CleanerLogger(sink=second_buffer)
    try:
        first.event("cli", "start")
        second.event("cli", "stop")
    finally:
        first.close()
        second.close()

    assert "event=start" in first_buffer.getvalue()
    assert "event=stop" not in first_buffer.getvalue()
    assert "event=stop" in second_buffer.getvalue()


def test_log_stage_failure_emits_error_event() -> None:
    """Stage failures should carry the error type only."""

    buffer = io.StringIO()
    logger = CleanerLogger(sink=buffer)
    try:
        logger.log_stage_failure("config", "ValueError")
    finally:
        logger.close()

    assert buffer.getvalue().strip() == (
        "[cleaner] level=ERROR stage=config event=failure error_type=ValueError"
    )


def test_close_is_idempotent() -> None:
    """Closing twice should not raise."""

    logger = CleanerLogger(sink=io.StringIO())
    logger.close()
    logger.close()
