"""Command-line interface for the diagnostics engine."""

from .main import main

__all__ = ["main"]
