"""
Command line interface for cortexevents.

Provides the `cortexevents` command, which prints the combined facial
expression / mental command state every time it changes.
"""

from .main import run_cli

__all__ = ["run_cli"]
