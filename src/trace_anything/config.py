"""Tracing options for trace-anything.

Every top-level tracing call (trace_class, trace_object, trace_member,
trace_prototype, trace_element) resolves its options into one frozen
TraceConfig, which is then passed by reference through every nested shim.

Example usage:
    # Defaults with overrides
    config = resolve_config(in_place=False, skip_properties={"buffered"})

    # Options in a JSON file (original camelCase names are accepted)
    config = load_config_file(Path("trace.json"))
"""

from __future__ import annotations

__all__ = [
    "TraceConfig",
    "load_config_file",
    "resolve_config",
]

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from trace_anything.constants import DEFAULT_ID_PROPERTY, DEFAULT_LISTENER_METHOD
from trace_anything.exceptions import ConfigurationError
from trace_anything.telemetry.console import default_logger


class TraceConfig(BaseModel):
    """Options for one tracing pass.

    Attributes:
        in_place: Mutate the original object instead of building a wrapper.
        methods: Trace method calls.
        properties: Trace property reads and writes.
        treat_promise_properties_as_events: Log settlement of future-valued
            properties as events.
        extra_properties: Additional member names to trace, including private
            names and members that do not exist yet.
        skip_properties: Member names never traced.
        events: Trace events (listener properties and listener registration).
        extra_events: Event names to listen for even if nobody else does.
        skip_events: Event names never traced.
        event_properties: Event name -> member name(s) whose value is logged
            with the event.
        explore_result_fields: Fields of returned values to trace recursively.
        logger: Sink receiving every trace log record.
        log_async_results_immediately: Log deferred results when returned
            (True) or when settled (False).
        id_property: Member used as display identity, if present.
        listener_method: Generic listener registration method,
            called as method(event_name, listener).

    Unknown options are kept and ignored.
    """

    in_place: bool = True
    methods: bool = True
    properties: bool = True
    treat_promise_properties_as_events: bool = True
    extra_properties: tuple[str, ...] = ()
    skip_properties: frozenset[str] = frozenset()
    events: bool = True
    extra_events: tuple[str, ...] = ()
    skip_events: frozenset[str] = frozenset()
    event_properties: dict[str, str | tuple[str, ...]] = {}
    explore_result_fields: tuple[str, ...] = ()
    logger: Callable[..., Any] = default_logger
    log_async_results_immediately: bool = True
    id_property: str | None = DEFAULT_ID_PROPERTY
    listener_method: str | None = DEFAULT_LISTENER_METHOD

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _format_validation_error(e: ValidationError) -> str:
    errors = []
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"])
        errors.append(f"  - {loc}: {error['msg']}")
    return "\n".join(errors)


def resolve_config(
    config: TraceConfig | Mapping[str, Any] | None = None,
    /,
    **overrides: Any,
) -> TraceConfig:
    """Merge options over the defaults.

    Args:
        config: Base options: a TraceConfig, a mapping of option names
            (python or original camelCase spelling), or None for defaults.
        **overrides: Options applied on top of config.

    Returns:
        Frozen TraceConfig. A TraceConfig passed without overrides is
        returned as is.

    Raises:
        ConfigurationError: If an option has an invalid value.
    """
    if isinstance(config, TraceConfig) and not overrides:
        return config

    if config is None:
        data: dict[str, Any] = {}
    elif isinstance(config, TraceConfig):
        data = config.model_dump()
    elif isinstance(config, Mapping):
        data = dict(config)
    else:
        raise ConfigurationError(
            f"Tracing options must be a TraceConfig or a mapping, got {type(config).__name__}"
        )

    try:
        return TraceConfig.model_validate({**data, **overrides})
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid tracing options:\n" + _format_validation_error(e)
        ) from e


def load_config_file(path: Path | str, encoding: str | None = None) -> TraceConfig:
    """Load tracing options from a JSON file.

    The 'logger' option cannot be given in a file; records go to the
    default console sink unless resolve_config() overrides it later.

    Args:
        path: Path to a JSON object of options.
        encoding: File encoding. If None, uses system default.

    Returns:
        Validated TraceConfig.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid JSON,
            or holds invalid options.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding=encoding) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    if "logger" in data:
        raise ConfigurationError(f"Invalid config file {path}:\n  - logger: cannot be set from a file")

    try:
        return TraceConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid config file {path}:\n" + _format_validation_error(e)
        ) from e
