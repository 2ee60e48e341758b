"""Per-pass state shared by the member shims of one traced value."""

from __future__ import annotations

__all__ = ["ShimContext"]

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from trace_anything.telemetry.models import TraceLog, WarningLog
from trace_anything.telemetry.recorder import LogDraft, now_ms

if TYPE_CHECKING:
    from trace_anything.config import TraceConfig
    from trace_anything.engine import TraceEngine


@dataclass(frozen=True)
class ShimContext:
    """Engine, options and class name bound into every shim of one value.

    Attributes:
        engine: Engine owning registries and identities.
        config: Options of the tracing pass.
        class_name: Name of the traced value's original class.
    """

    engine: TraceEngine
    config: TraceConfig
    class_name: str

    def identity(self, instance: Any) -> Any:
        return self.engine.identities.get_identity(instance, self.class_name, self.config)

    def start(self, model: type[TraceLog], instance: Any, **fields: Any) -> LogDraft:
        """Open a draft for an occurrence on instance."""
        return LogDraft(
            model,
            instance=instance,
            instance_id=self.identity(instance),
            class_name=self.class_name,
            **fields,
        )

    def emit(self, draft: LogDraft, *, timed: bool = True) -> None:
        self.engine.emit(self.config, draft.build(timed=timed))

    def warn(self, message: str) -> None:
        self.engine.emit(self.config, WarningLog(timestamp=now_ms(), message=message))

    def propagate(self, value: Any) -> Any:
        return self.engine.propagate(value, self.config)
