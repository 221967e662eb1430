"""Command line interface for finledger."""

from .commands import main

__all__ = ["main"]
