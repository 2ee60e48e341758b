"""Run command for trace-anything CLI.

Runs a Python script or module with chosen classes traced, like
``python script.py`` / ``python -m module``.
"""

from __future__ import annotations

__all__ = ["run"]

import importlib
import runpy
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from trace_anything.config import TraceConfig, load_config_file, resolve_config
from trace_anything.engine import get_engine
from trace_anything.exceptions import ConfigurationError
from trace_anything.telemetry.console import create_console_logger

from ..styling import style_dim, style_error


def _resolve_class(target_name: str) -> tuple[Any, str, type]:
    """Import the class named by "module:Class" (Class may be a dotted path).

    Returns:
        (owner, attribute name, class): owner is the module or outer class
        holding the class under attribute name.

    Raises:
        ValueError: If target_name is malformed or does not name a class.
        ImportError: If the module cannot be imported.
    """
    module_name, sep, qualname = target_name.partition(":")
    if not sep or not module_name or not qualname:
        raise ValueError(f"Invalid --trace value '{target_name}' (expected MODULE:CLASS)")

    owner: Any = importlib.import_module(module_name)
    *parents, name = qualname.split(".")
    for parent in parents:
        owner = getattr(owner, parent, None)
        if owner is None:
            raise ValueError(f"'{module_name}' has no attribute '{parent}'")

    cls = getattr(owner, name, None)
    if not isinstance(cls, type):
        raise ValueError(f"'{target_name}' does not name a class")
    return owner, name, cls


def _fail(message: str) -> NoReturn:
    click.echo(style_error(f"Error: {message}"), err=True)
    sys.exit(1)


@click.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option(
    "--trace",
    "-t",
    "trace_names",
    multiple=True,
    metavar="MODULE:CLASS",
    help="Class to trace (repeatable). The module attribute is replaced by the traced class.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON file with tracing options",
)
@click.option("--json", "json_output", is_flag=True, help="Write records as JSON lines")
@click.option("--settle", is_flag=True, help="Log async results when they settle, not when returned")
@click.option("--module", "-m", "as_module", is_flag=True, help="TARGET is a module name, not a script path")
@click.argument("target")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def run(
    trace_names: tuple[str, ...],
    config_path: Path | None,
    json_output: bool,
    settle: bool,
    as_module: bool,
    target: str,
    args: tuple[str, ...],
) -> None:
    """Run TARGET with the given classes traced.

    Records are written to stderr. Arguments after TARGET are passed to it.

    \b
    Examples:
      trace-anything run -t player:Player app.py --fullscreen
      trace-anything run -t shop.cart:Cart --settle --json -m shop
    """
    try:
        base = load_config_file(config_path) if config_path else TraceConfig()
        overrides: dict[str, Any] = {"logger": create_console_logger(json_output=json_output)}
        if settle:
            overrides["log_async_results_immediately"] = False
        config = resolve_config(base, **overrides)
    except ConfigurationError as e:
        _fail(str(e))

    if as_module:
        search_path = str(Path.cwd())
    else:
        script = Path(target)
        if not script.is_file():
            _fail(f"Script not found: {target}")
        search_path = str(script.resolve().parent)

    # Same import behavior as the interpreter running TARGET directly
    if search_path not in sys.path:
        sys.path.insert(0, search_path)

    engine = get_engine()
    for target_name in trace_names:
        try:
            owner, name, cls = _resolve_class(target_name)
        except (ImportError, ValueError) as e:
            _fail(str(e))
        setattr(owner, name, engine.trace_class(cls, config))
        click.echo(style_dim(f"Tracing {cls.__module__}.{cls.__qualname__}"), err=True)

    saved_argv = sys.argv[:]
    sys.argv = [target, *args]
    try:
        if as_module:
            runpy.run_module(target, run_name="__main__", alter_sys=True)
        else:
            runpy.run_path(target, run_name="__main__")
    finally:
        sys.argv = saved_argv
