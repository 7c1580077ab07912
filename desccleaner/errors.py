"""Domain exceptions for configuration and CLI diagnostics."""

from __future__ import annotations


class CleanerStageError(RuntimeError):
    """Raised when a named stage (config, input, output) cannot proceed."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped error with an optional remediation hint."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
