"""Module entrypoint for running desccleaner as ``python -m desccleaner``."""

from __future__ import annotations

from desccleaner.cli import main


if __name__ == "__main__":
    main()
