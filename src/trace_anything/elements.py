"""Element tracing: trace every element with a tag name, now and later.

Elements come from an ElementSource, which can list the current elements
with a tag name and report elements added later. Adapters for concrete
trees (documents, widget hierarchies, scene graphs) implement the protocol.
"""

from __future__ import annotations

__all__ = [
    "ElementRegistry",
    "ElementSource",
    "scan_for_new_elements",
    "trace_element",
]

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from trace_anything.shims.objects import trace_object

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig
    from trace_anything.engine import TraceEngine


@runtime_checkable
class ElementSource(Protocol):
    """A tree of elements that can be queried and observed."""

    def find_elements(self, tag_name: str) -> Iterable[Any]:
        """Current elements with tag_name."""
        ...

    def on_element_added(self, tag_name: str, callback: Callable[[Any], None]) -> None:
        """Call callback with every element with tag_name added from now on."""
        ...


class ElementRegistry:
    """Tag names traced per engine and the sources already observed.

    Attributes:
        configs: Lower-cased tag name -> options of its latest trace_element call.
    """

    def __init__(self) -> None:
        self.configs: dict[str, TraceConfig] = {}
        self._subscriptions: dict[tuple[int, str], ElementSource] = {}

    def subscribe(self, source: ElementSource, tag_name: str, callback: Callable[[Any], None]) -> None:
        """Subscribe callback once per (source, tag name)."""
        key = (id(source), tag_name.lower())
        if key in self._subscriptions:
            return
        # The source is kept alive so its id is not reused
        self._subscriptions[key] = source
        source.on_element_added(tag_name, callback)


def _trace_existing(engine: TraceEngine, source: ElementSource, tag_name: str, config: TraceConfig) -> None:
    for element in source.find_elements(tag_name):
        trace_object(engine, element, config)


def trace_element(engine: TraceEngine, source: ElementSource, tag_name: str, config: TraceConfig) -> None:
    """Trace existing and future elements with tag_name.

    Elements added later are traced with the options of the latest
    trace_element call for their tag name.

    Args:
        engine: Engine owning the element registry.
        source: Element tree.
        tag_name: Tag name (case-insensitive).
        config: Resolved options.
    """
    key = tag_name.lower()
    _trace_existing(engine, source, tag_name, config)
    engine.elements.configs[key] = config

    def _on_added(element: Any) -> None:
        latest = engine.elements.configs.get(key)
        if latest is not None:
            trace_object(engine, element, latest)

    engine.elements.subscribe(source, tag_name, _on_added)


def scan_for_new_elements(engine: TraceEngine, source: ElementSource) -> None:
    """Trace current elements of every remembered tag name in source.

    Elements traced before are left as they are, so scanning is idempotent.
    """
    for tag_name, config in list(engine.elements.configs.items()):
        _trace_existing(engine, source, tag_name, config)
