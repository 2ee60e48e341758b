"""Interception machinery: the shims installed on traced values.

Structure:
    descriptors.py  Shim base class and untraced member reads
    targets.py      In-place class swap and wrapper objects
    context.py      ShimContext bound into every shim of one pass
    classify.py     Member classification
    methods.py      Method shim (sync and deferred results)
    properties.py   Property, silent and future-valued member shims
    events.py       Listener wrapping, listener properties, discovery
    objects.py      Object shim (trace_object, trace_member, trace_prototype)
    classes.py      Class shim (trace_class)
    propagate.py    Return-value propagation

Import directly from submodules to avoid circular imports:
    from trace_anything.shims.objects import trace_object
"""

__all__: list[str] = []
