"""
``spew.base``: Traversal
========================

The traversal of values is separated from the rendering. :func:`reduce_value`
walks a value, resolving pointers, cycles, custom ``__str__`` methods and
depth limits, and hands the pieces to an :class:`Accumulator` that decides
what they look like.

Accumulators are given iterators over the sub-values so that they get a
chance to do something both before and after the children are visited.
"""

from __future__ import annotations

import abc
import collections.abc
import contextlib
import dataclasses
import enum
import logging
import math
from typing import Any, Callable, Generic, Iterator, TypeVar

from spew import classify
from spew.classify import Kind, ValueDescriptor
from spew.config import ConfigState
from spew.tracker import CycleTracker

__all__ = (
    "Accumulator",
    "FormatContext",
    "MethodResult",
    "PointerState",
    "call_method",
    "reduce_value",
    "sort_key",
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V")


class PointerState(enum.Enum):
    "How a chain of pointers ended"
    #: We reached a value that isn't a pointer
    VALUE = enum.auto()
    NIL = enum.auto()
    CYCLE = enum.auto()
    MAX_DEPTH = enum.auto()


@dataclasses.dataclass(slots=True, frozen=True)
class MethodResult:
    "What a custom ``__str__`` gave us"
    text: str
    failed: bool = False


@dataclasses.dataclass(slots=True)
class FormatContext:
    """State of the rendering of one top-level value.

    Attributes:
      config: The options in use.
      tracker: The addresses on the current path.
      depth: Number of aggregates we are nested in.
      indirects: Number of pointers followed to reach the current value.
      transient: Intermediate values we hold on to so that their ``id`` isn't
        reused while we are still rendering.
    """

    config: ConfigState
    tracker: CycleTracker = dataclasses.field(default_factory=CycleTracker)
    depth: int = 0
    indirects: int = 0
    transient: list[Any] = dataclasses.field(default_factory=list)


class Accumulator(Generic[T, V], abc.ABC):
    @abc.abstractmethod
    def annotate(
        self, desc: ValueDescriptor, body: T
    ) -> T:  # pragma: no cover
        "Attach the type of a value to its rendering"

    @abc.abstractmethod
    def nil(self) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def scalar(self, text: str) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def string(self, value: str) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def bytes(
        self, value: bytes, capacity: int | None
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def opaque(self, address: int) -> T:  # pragma: no cover
        "Channels and functions: we never look inside of them."

    @abc.abstractmethod
    def invalid(self) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def cycle(self) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def method(self, result: MethodResult) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def prefixed(
        self, result: MethodResult, body: T
    ) -> T:  # pragma: no cover
        "The output of a custom method followed by the structure of the value"

    # The iterators are `None` when the depth limit cuts the value short.
    @abc.abstractmethod
    def struct(
        self, fields: Iterator[tuple[str, T]] | None
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def sequence(
        self, size: int, capacity: int | None, items: Iterator[T] | None
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def mapping(
        self, size: int, items: Iterator[tuple[T, T]] | None
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def pointer(
        self,
        type_name: str,
        indirects: int,
        addresses: list[int],
        state: PointerState,
        target: T | None,
    ) -> T:  # pragma: no cover
        ...

    @abc.abstractmethod
    def root(self, value: T) -> V:  # pragma: no cover
        ...


def call_method(value: Any) -> MethodResult:
    """Call the ``__str__`` of *value*, catching everything it throws at us.

    >>> class Broken:
    ...     def __str__(self):
    ...         raise ValueError("boom")
    >>> call_method(Broken())
    MethodResult(text='(PANIC=ValueError: boom)', failed=True)
    """
    try:
        return MethodResult(str(value))
    except Exception as e:
        logger.debug(
            "__str__ failed on a value of type %s",
            classify.type_name(type(value)),
            exc_info=True,
        )
        try:
            msg = str(e)
        except Exception:
            msg = "<invalid>"
        # Clear out all the fields set by `raise ...` that might keep the
        # value alive.
        e.__cause__ = e.__context__ = e.__traceback__ = None
        return MethodResult(f"(PANIC={type(e).__name__}: {msg})", failed=True)


def sort_key(key: Any, fallback: Callable[[Any], str]) -> tuple[int, Any]:
    """A total order on arbitrary keys.

    Keys are grouped by kind first (``None``, bools, numbers, strings,
    bytes, everything else). Values with no natural order use the string
    returned by *fallback*.

    >>> sorted([2, "b", None, 1.5, "a", True], key=lambda k: sort_key(k, repr))
    [None, True, 1.5, 2, 'a', 'b']
    """
    match key:
        case None:
            return (0, 0)
        case bool():
            return (1, int(key))
        case int():
            return (2, int(key))
        case float() if not math.isnan(key):
            return (2, float(key))
        case float():
            return (3, 0)
        case str():
            return (4, str(key))
        case bytes():
            return (5, bytes(key))
    return (6, fallback(key))


def reduce_value(obj: Any, acc: Accumulator[T, V], config: ConfigState) -> V:
    """Render one top-level value with *acc*."""
    ctx = FormatContext(config)
    tracker = ctx.tracker

    def fallback(key: Any) -> str:
        # Keys without a natural order are compared by their inline
        # rendering (``%#v`` with `spew_keys`, ``%v`` otherwise).
        from spew import inline

        return inline.render(key, config, types=config.spew_keys)

    def ordered(values: list[Any], key: Callable[[Any], Any]) -> list[Any]:
        if not config.sort_keys:
            return values
        try:
            return sorted(values, key=lambda v: sort_key(key(v), fallback))
        except Exception:
            logger.debug("failed to sort keys", exc_info=True)
            return values

    def method_for(v: Any, desc: ValueDescriptor) -> MethodResult | None:
        if config.disable_methods or desc.capability is None:
            return None
        if ctx.indirects and config.disable_pointer_methods:
            return None
        return call_method(v)

    def aggregate(build: Callable[[bool], T]) -> T:
        # `build(truncated)` renders the body of the aggregate.
        ctx.depth += 1
        indirects = ctx.indirects
        ctx.indirects = 0
        try:
            if config.depth_exceeded(ctx.depth):
                return build(True)
            try:
                return build(False)
            except RecursionError:
                return build(True)
        finally:
            ctx.depth -= 1
            ctx.indirects = indirects

    def struct(v: Any) -> Callable[[bool], T]:
        def build(truncated: bool) -> T:
            if truncated:
                return acc.struct(None)
            fields = classify.struct_fields(v)
            return acc.struct((name, reduce(fv)) for name, fv in fields)

        return build

    def sequence(v: Any) -> Callable[[bool], T]:
        def build(truncated: bool) -> T:
            size = len(v)
            cap = None if config.disable_capacities else classify.capacity(v)
            if truncated:
                return acc.sequence(size, cap, None)
            items = list(v)
            # Sets are the only sequences without an order of their own.
            if isinstance(v, collections.abc.Set):
                items = ordered(items, lambda x: x)
            return acc.sequence(size, cap, (reduce(item) for item in items))

        return build

    def mapping(v: Any) -> Callable[[bool], T]:
        def build(truncated: bool) -> T:
            size = len(v)
            if truncated:
                return acc.mapping(size, None)
            items = ordered(list(v.items()), lambda kv: kv[0])
            return acc.mapping(
                size, ((reduce(k), reduce(x)) for k, x in items)
            )

        return build

    def pointer(v: Any) -> T:
        levels = 0
        addresses: list[int] = []
        state = PointerState.VALUE
        cur = v
        pointee = "object"
        with contextlib.ExitStack() as stack:
            while classify.kind_of(cur) is Kind.POINTER:
                if config.depth_exceeded(levels + 1):
                    state = PointerState.MAX_DEPTH
                    pointee = classify.pointee_type_name(cur)
                    # `cur` is itself a pointer.
                    levels += 1
                    break
                target, address = classify.deref(cur)
                levels += 1
                if target is classify.NIL:
                    state = PointerState.NIL
                    pointee = classify.pointee_type_name(cur)
                    break
                assert address is not None
                addresses.append(address)
                ctx.transient.append(target)
                pointee = classify.type_name(type(target))
                if address in tracker:
                    state = PointerState.CYCLE
                    break
                # Objects with an identity of their own get tracked when we
                # render them.
                if not classify.is_reference(target):
                    stack.enter_context(tracker.visiting(address))
                cur = target
            rendered: T | None = None
            if state is PointerState.VALUE:
                saved = ctx.indirects
                ctx.indirects = saved + levels
                try:
                    rendered = reduce(cur, typed=False)
                finally:
                    ctx.indirects = saved
            return acc.pointer(pointee, levels, addresses, state, rendered)

    def dispatch(v: Any, desc: ValueDescriptor, typed: bool) -> T:
        kind = desc.kind

        def annotated(body: T) -> T:
            return acc.annotate(desc, body) if typed else body

        if kind is Kind.NIL:
            return annotated(acc.nil())
        if kind is Kind.BOXED:
            target, _ = classify.deref(v)
            if target is classify.NIL:
                return annotated(acc.nil())
            ctx.transient.append(target)
            return reduce(target, typed=typed)

        method = method_for(v, desc)
        if method is not None and not config.continue_on_method:
            return annotated(acc.method(method))
        if kind is Kind.POINTER:
            body = pointer(v)
            # The pointer carries its own type annotation.
            return body if method is None else acc.prefixed(method, body)

        match kind:
            case Kind.SCALAR:
                body = acc.scalar(classify.scalar_text(v))
            case Kind.STRING:
                body = acc.string(str.__str__(v))
            case Kind.BYTES:
                cap = None
                if not config.disable_capacities:
                    cap = classify.capacity(v)
                body = acc.bytes(bytes(v), cap)
            case Kind.CHANNEL | Kind.FUNCTION:
                body = acc.opaque(classify.address(v))
            case Kind.STRUCT | Kind.SEQUENCE | Kind.MAPPING:
                if kind is Kind.STRUCT:
                    build = struct(v)
                elif kind is Kind.SEQUENCE:
                    build = sequence(v)
                else:
                    build = mapping(v)
                if classify.is_reference(v):
                    with tracker.visiting(id(v)) as fresh:
                        if not fresh:
                            return annotated(acc.cycle())
                        body = aggregate(build)
                else:
                    body = aggregate(build)
            case Kind.INVALID:
                return annotated(acc.invalid())

        if method is not None:
            body = acc.prefixed(method, body)
        return annotated(body)

    def reduce(v: Any, typed: bool = True) -> T:
        if v is classify.INVALID:
            return acc.invalid()
        try:
            desc = classify.describe(v)
        except RecursionError:
            raise
        except Exception:
            logger.debug("failed to classify a value", exc_info=True)
            return acc.invalid()
        try:
            return dispatch(v, desc, typed)
        except RecursionError:
            raise
        except Exception:
            logger.debug(
                "failed to render a value of type %s",
                desc.type_name,
                exc_info=True,
            )
            if typed:
                return acc.annotate(desc, acc.invalid())
            return acc.invalid()

    try:
        res = reduce(obj)
    except RecursionError:
        res = acc.invalid()
    finally:
        ctx.transient.clear()
    return acc.root(res)
