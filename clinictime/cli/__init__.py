"""clinictime command line interface package."""

from __future__ import annotations

from .app import app

__all__ = ["app", "console_main"]


def console_main() -> None:
    """Entry point used by the ``clinictime`` console script."""

    app()
