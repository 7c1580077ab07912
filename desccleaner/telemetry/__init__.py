"""Advisory logging for cleaner activity."""

from .logger import CleanerLogger

__all__ = ["CleanerLogger"]
