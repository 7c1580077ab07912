"""Structured event logging for the normalizer, watch, and CLI stages.

Responsibilities:
- Emit concise, deterministic one-line events through `loguru`.
- Keep lines parseable: `[cleaner] level=... stage=... event=... key=value`.

Logging is advisory; nothing in the library depends on it.
"""

from __future__ import annotations

from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", "#"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class CleanerLogger:
    """Emit deterministic event lines for watch and CLI activity.

    When a sink is given, it receives this logger's lines only; otherwise
    lines go to whatever sinks loguru is configured with.
    """

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Bind a per-instance logger and attach the optional sink."""

        self._logger = _loguru_logger.bind(cleaner_logger_id=id(self))
        self._sink_id: int | None = None
        if sink is not None:
            owner_id = id(self)
            self._sink_id = _loguru_logger.add(
                sink,
                format="{message}",
                level=level,
                colorize=False,
                filter=lambda record: record["extra"].get("cleaner_logger_id") == owner_id,
            )

    def close(self) -> None:
        """Detach the sink added at construction."""

        if self._sink_id is not None:
            _loguru_logger.remove(self._sink_id)
            self._sink_id = None

    def event(self, stage: str, event: str, *, level: str = "INFO", **context: object) -> None:
        """Emit one structured event line."""

        line = f"[cleaner] level={level} stage={stage} event={event}{_format_context(context)}"
        self._logger.log(level, line)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure event without payload details."""

        self.event(stage, "failure", level="ERROR", error_type=error_type)
