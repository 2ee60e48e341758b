"""Application-wide constants for trace-anything.

Constants that define engine behavior.
For per-call tracing options, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "LOG_PREFIX",
    # Markers stored on traced values
    "TRACED_MARKER",
    "EVENTS_MARKER",
    "GENERATED_ID_MARKER",
    "SHIM_CLASS_MARKER",
    "STAMP_OWNER_MARKER",
    # Member discovery
    "EVENT_PROPERTY_PREFIX",
    "CHANGE_EVENT_SUFFIX",
    "DEFAULT_ID_PROPERTY",
    "DEFAULT_LISTENER_METHOD",
    # Log formatting
    "RESULT_REPR_MAX_LENGTH",
]

# ============================================================================
# Application Identity
# ============================================================================

# Application name used for logger names and the CLI
APP_NAME: str = "trace-anything"

# Prefix of every line written by the default console sink
LOG_PREFIX: str = "TraceAnything"

# ============================================================================
# Markers
# ============================================================================

# Set once a value has passed through the object shim (idempotence guard)
TRACED_MARKER: str = "_trace_anything_traced"

# Set of event names observed on a traced value
EVENTS_MARKER: str = "_trace_anything_events"

# Identity generated for values without an id property
GENERATED_ID_MARKER: str = "_trace_anything_id"

# Present in the namespace of per-instance shim classes and wrapper classes.
# Markers of their instances live on these classes.
SHIM_CLASS_MARKER: str = "_trace_anything_shim_class"

# The one instance whose markers a shim class holds; copies sharing the class
# do not inherit them
STAMP_OWNER_MARKER: str = "_trace_anything_stamp_owner"

# ============================================================================
# Member Discovery
# ============================================================================

# Members named on<event> / on_<event> are event listener properties
EVENT_PROPERTY_PREFIX: str = "on"

# "volumechange" correlates with the "volume" member
CHANGE_EVENT_SUFFIX: str = "change"

# Member preferred as display identity of a traced instance
DEFAULT_ID_PROPERTY: str = "id"

# Generic listener registration method, called as method(event_name, listener)
DEFAULT_LISTENER_METHOD: str = "add_event_listener"

# ============================================================================
# Log Formatting
# ============================================================================

# Truncation limit for reprs in JSON log output
RESULT_REPR_MAX_LENGTH: int = 1000
