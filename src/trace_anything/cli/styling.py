"""CLI output styling utilities.

Provides consistent styling helpers for CLI output:
- Red for error messages (with cross)
- Dim for neutral status messages
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_error",
]

import click


def style_error(message: str) -> str:
    """Style an error message with cross mark.

    Args:
        message: The error message text (without cross).

    Returns:
        Styled string with red color and cross prefix.

    Example:
        >>> click.echo(style_error("Script not found"), err=True)
        ✗ Script not found
    """
    return click.style(f"✗ {message}", fg="red")


def style_dim(message: str) -> str:
    """Style a neutral status message as dim.

    Args:
        message: The message text.

    Returns:
        Styled string with dim appearance.
    """
    return click.style(message, dim=True)
