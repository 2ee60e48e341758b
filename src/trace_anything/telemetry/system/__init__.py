"""System operational logging.

Provides the system logger for diagnostics of the engine itself (class swaps
refused, members left untouched), kept apart from trace records.
"""

from trace_anything.telemetry.system.system_logger import (
    ConsoleFormatter,
    get_system_logger,
)

__all__ = [
    "ConsoleFormatter",
    "get_system_logger",
]
