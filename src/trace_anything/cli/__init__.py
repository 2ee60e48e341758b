"""Command-line interface for trace-anything.

Provides the run command, which executes a script or module with chosen
classes traced.
"""

from .main import cli, main

__all__ = ["cli", "main"]
