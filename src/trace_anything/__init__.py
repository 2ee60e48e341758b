"""trace-anything: trace calls, attribute access and events on any Python object.

Given an object, or a class whose instances should always be traced, the
engine produces a functionally equivalent object whose method calls,
attribute reads and writes, and fired events are reported as structured
log records to a pluggable sink.

Example usage:
    from trace_anything import trace_class, trace_object

    Player = trace_class(Player)
    player = Player("intro.mp4")       # Constructor record
    player.play()                      # Method record

    trace_object(existing, logger=records.append)
"""

__version__ = "0.1.0"

from trace_anything.config import TraceConfig, load_config_file, resolve_config
from trace_anything.elements import ElementSource
from trace_anything.engine import (
    TraceEngine,
    get_engine,
    scan_for_new_elements,
    trace_class,
    trace_element,
    trace_member,
    trace_object,
    trace_prototype,
)
from trace_anything.exceptions import ConfigurationError, TraceAnythingError
from trace_anything.telemetry.console import create_console_logger, default_logger
from trace_anything.telemetry.models import (
    ConstructorLog,
    EventLog,
    GetterLog,
    LogType,
    MethodLog,
    SetterLog,
    TraceLog,
    WarningLog,
)

__all__ = [
    "__version__",
    # Tracing
    "TraceEngine",
    "get_engine",
    "scan_for_new_elements",
    "trace_class",
    "trace_element",
    "trace_member",
    "trace_object",
    "trace_prototype",
    "ElementSource",
    # Options
    "TraceConfig",
    "load_config_file",
    "resolve_config",
    # Records and sinks
    "ConstructorLog",
    "EventLog",
    "GetterLog",
    "LogType",
    "MethodLog",
    "SetterLog",
    "TraceLog",
    "WarningLog",
    "create_console_logger",
    "default_logger",
    # Errors
    "ConfigurationError",
    "TraceAnythingError",
]
