"""Command line interface (``python -m stratassign.cli`` / ``stratassign``)."""

from .__main__ import main

__all__ = ["main"]
