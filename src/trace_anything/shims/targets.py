"""Where the member shims of one traced value live.

In place, the value's class is swapped for a per-instance subclass (same
name, qualname and module, no new slots) and shims become attributes of that
subclass. The value stays an instance of its original class.

Otherwise the value is represented by a wrapper: an instance of a
per-wrapper subclass of TracedWrapper that holds the original object,
reports the original class as its __class__, carries the shims, and forwards
every other attribute access to the original. Special methods the original
class defines (container, context manager, call and operator protocols) are
forwarded by the wrapper class, since the interpreter looks them up on the
type.
"""

from __future__ import annotations

__all__ = [
    "ShimTarget",
    "TracedWrapper",
    "make_wrapper",
    "swap_class",
    "unwrap",
]

import types
from typing import Any

from trace_anything.constants import SHIM_CLASS_MARKER
from trace_anything.shims.descriptors import instance_dict, is_data_descriptor, lookup_static
from trace_anything.telemetry.system import get_system_logger

_TARGET_SLOT = "_trace_anything_target"
_ORIGINAL_CLASS = "_trace_anything_original_class"


# ============================================================================
# Wrappers
# ============================================================================


class TracedWrapper:
    """Base of wrapper classes standing in for an original object.

    isinstance() checks against the original class succeed because
    __class__ reports it. Attributes without a shim on the wrapper class
    are read from, written to and deleted on the original object.
    """

    __slots__ = (_TARGET_SLOT,)

    def __init__(self, target: Any) -> None:
        object.__setattr__(self, _TARGET_SLOT, target)

    @property
    def __class__(self) -> type:  # type: ignore[override]
        return getattr(type(self), _ORIGINAL_CLASS)

    def __getattr__(self, name: str) -> Any:
        if name == _TARGET_SLOT:
            raise AttributeError(name)
        return getattr(object.__getattribute__(self, _TARGET_SLOT), name)

    def __setattr__(self, name: str, value: Any) -> None:
        if is_data_descriptor(lookup_static(type(self), name)):
            object.__setattr__(self, name, value)
        else:
            setattr(object.__getattribute__(self, _TARGET_SLOT), name, value)

    def __delattr__(self, name: str) -> None:
        if is_data_descriptor(lookup_static(type(self), name)):
            object.__delattr__(self, name)
        else:
            delattr(object.__getattribute__(self, _TARGET_SLOT), name)

    def __repr__(self) -> str:
        return repr(unwrap(self))

    def __str__(self) -> str:
        return str(unwrap(self))

    def __dir__(self) -> list[str]:
        return dir(unwrap(self))

    def __eq__(self, other: object) -> bool:
        return unwrap(self) == unwrap(other)

    def __hash__(self) -> int:
        return hash(unwrap(self))

    def __bool__(self) -> bool:
        return bool(unwrap(self))


def unwrap(value: Any) -> Any:
    """The original object behind a wrapper; any other value unchanged."""
    if isinstance(value, TracedWrapper):
        return object.__getattribute__(value, _TARGET_SLOT)
    return value


# Special methods looked up on the type; forwarded when the original class
# defines them
_FORWARDED_SPECIALS = (
    # containers and iteration
    "__len__", "__length_hint__", "__iter__", "__next__", "__reversed__",
    "__contains__", "__getitem__", "__setitem__", "__delitem__",
    # context managers, calls and coroutines
    "__enter__", "__exit__", "__aenter__", "__aexit__",
    "__call__", "__await__", "__aiter__", "__anext__",
    # comparisons
    "__lt__", "__le__", "__gt__", "__ge__", "__ne__",
    # numbers
    "__add__", "__sub__", "__mul__", "__matmul__", "__truediv__", "__floordiv__",
    "__mod__", "__divmod__", "__pow__", "__lshift__", "__rshift__",
    "__and__", "__xor__", "__or__",
    "__radd__", "__rsub__", "__rmul__", "__rmatmul__", "__rtruediv__", "__rfloordiv__",
    "__rmod__", "__rdivmod__", "__rpow__", "__rlshift__", "__rrshift__",
    "__rand__", "__rxor__", "__ror__",
    "__iadd__", "__isub__", "__imul__", "__imatmul__", "__itruediv__", "__ifloordiv__",
    "__imod__", "__ipow__", "__ilshift__", "__irshift__",
    "__iand__", "__ixor__", "__ior__",
    "__neg__", "__pos__", "__abs__", "__invert__",
    "__int__", "__float__", "__complex__", "__index__",
    "__round__", "__trunc__", "__floor__", "__ceil__",
    # conversions
    "__bytes__", "__format__", "__fspath__",
)


def _forwarder(name: str) -> Any:
    def forward(self: Any, *args: Any, **kwargs: Any) -> Any:
        target = unwrap(self)
        result = getattr(type(target), name)(target, *args, **kwargs)
        # Keep handing out the wrapper where the original returns itself
        return self if result is target else result

    forward.__name__ = name
    return forward


def _special_forwarders(original_class: type) -> dict[str, Any]:
    namespace = {}
    for name in _FORWARDED_SPECIALS:
        attr = getattr(original_class, name, None)
        if attr is not None and attr is not getattr(object, name, None):
            namespace[name] = _forwarder(name)
    return namespace


def make_wrapper(obj: Any) -> TracedWrapper:
    """Build a wrapper for obj with its own, still empty, wrapper class."""
    original_class = type(obj)
    namespace = {
        "__slots__": (),
        "__module__": original_class.__module__,
        "__qualname__": original_class.__qualname__,
        "__doc__": original_class.__doc__,
        SHIM_CLASS_MARKER: True,
        _ORIGINAL_CLASS: original_class,
    }
    namespace.update(_special_forwarders(original_class))
    wrapper_class = type(original_class.__name__, (TracedWrapper,), namespace)
    return wrapper_class(obj)


# ============================================================================
# In-place class swap
# ============================================================================


def swap_class(obj: Any, base: type | None = None) -> type | None:
    """Give obj a per-instance subclass of its class.

    Args:
        obj: Object to modify.
        base: Class to derive from instead of type(obj); must be a subclass
            of type(obj) that adds no instance layout.

    Returns:
        The new class, or None if the class cannot be subclassed or
        the interpreter refuses the assignment (builtins, functions,
        final classes).
    """
    original_class = type(obj)
    base = base or original_class

    def _fill(namespace: dict[str, Any]) -> None:
        namespace.update(
            {
                "__slots__": (),
                "__module__": original_class.__module__,
                "__qualname__": original_class.__qualname__,
                "__doc__": original_class.__doc__,
                SHIM_CLASS_MARKER: True,
            }
        )

    try:
        shim_class = types.new_class(original_class.__name__, (base,), {}, _fill)
        obj.__class__ = shim_class
    except Exception as e:
        get_system_logger().debug(
            {
                "event": "class_swap_refused",
                "class_name": original_class.__name__,
                "error": str(e),
                "error_type": type(e).__name__,
                "message": f"Cannot swap class of {original_class.__name__} instance",
            }
        )
        return None
    return shim_class


# ============================================================================
# Shim targets
# ============================================================================


class ShimTarget:
    """The traced value of one pass and the namespace its shims go into.

    Attributes:
        value: Traced value handed back to the application (the original
            object in place, else the wrapper).
        original: Original object.
        shim_class: Class receiving shims, or None when the original is
            traced in place but its class could not be swapped.
        in_place: Whether the original object itself is modified.
    """

    def __init__(self, value: Any, original: Any, shim_class: type | None, *, in_place: bool) -> None:
        self.value = value
        self.original = original
        self.shim_class = shim_class
        self.in_place = in_place

    @classmethod
    def in_place_of(cls, obj: Any, base: type | None = None) -> ShimTarget:
        # Reuse the shim class of a value traced before (trace_member)
        if SHIM_CLASS_MARKER in type(obj).__dict__:
            return cls(obj, obj, type(obj), in_place=True)
        return cls(obj, obj, swap_class(obj, base), in_place=True)

    @classmethod
    def wrapper_of(cls, obj: Any) -> ShimTarget:
        wrapper = make_wrapper(obj)
        return cls(wrapper, obj, type(wrapper), in_place=False)

    def owns_in_dict(self, name: str) -> bool:
        """Whether name is stored in the original's instance __dict__ (in place only)."""
        if not self.in_place:
            return False
        namespace = instance_dict(self.original)
        return namespace is not None and name in namespace

    def install(self, name: str, shim: Any) -> bool:
        """Install a descriptor shim on the shim class.

        Returns:
            False if there is no shim class to install on.
        """
        if self.shim_class is None:
            return False
        setattr(self.shim_class, name, shim)
        return True

    def uninstall(self, name: str) -> None:
        """Remove a shim installed with install(), exposing the original member again."""
        if self.shim_class is not None and name in self.shim_class.__dict__:
            delattr(self.shim_class, name)

    def install_method(self, name: str, shim: Any) -> bool:
        """Install a method shim where calls will find it.

        Callables stored in the instance __dict__ shadow class attributes,
        so in place they are replaced in the instance __dict__ with the shim
        bound to the value.

        Returns:
            False if the method could not be installed anywhere.
        """
        if self.owns_in_dict(name):
            instance_dict(self.original)[name] = types.MethodType(shim, self.value)
            return True
        return self.install(name, shim)
