"""
zil_sdk.cli
===========

Typer-based command line (`zil-sdk`). See :mod:`zil_sdk.cli.main`.
"""

from .main import app, main, run

__all__ = ["app", "main", "run"]
