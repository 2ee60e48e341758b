"""Telemetry domain: trace records, their console sinks, and system events.

Structure:
    models/         Pydantic models for trace log records
    recorder.py     LogDraft, the builder every shim emits through
    console.py      Default console sink and create_console_logger()
    system/         System logger for diagnostics of the engine itself

Import directly from submodules to avoid circular imports:
    from trace_anything.telemetry.console import default_logger
"""

__all__: list[str] = []
