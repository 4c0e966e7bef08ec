"""Reactive state cells and the dependency graph that propagates their changes.

Values and their listeners live in FletX ``Reactive`` objects. A
:class:`StateGraph` owns every :class:`Cell` (writable, one per concern) and
every :class:`Derived` node (read-only, recomputed from upstream nodes), and
decides when listeners run. A write to a cell:

1. replaces the cell's value,
2. recomputes every downstream derived node whose inputs changed, in
   topological order,
3. notifies subscribers: the cell first, then each derived node that
   actually changed, in the same topological order.

Steps 1 and 2 always happen before ``set`` returns, so ``get`` right after a
write sees it. When the write comes from a subscriber, step 3 is deferred
until the running notification pass has finished, so notifications never
interleave and subscribers never observe a half-propagated graph.
"""

from __future__ import annotations

import logging
import warnings
from collections import deque
from typing import Any, Callable, Deque, Dict, Generic, List, Sequence, Set, Tuple, TypeVar

from fletx.core import Observer, Reactive

# Importing fletx switches off all logging unless FLETX_ENABLE_LOGGING=1
logging.disable(logging.NOTSET)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[T], None]


def _same(current: Any, new: Any) -> bool:
    return current is new or current == new


class _OrderedObservers(dict):
    """Insertion-ordered replacement for the observer set of a ``Reactive``.

    Observers disposed during a dispatch are removed twice, once by
    ``dispose`` and once by the dispatch loop, so removal tolerates misses.
    """

    def add(self, observer: Observer) -> None:
        self[observer] = None

    def remove(self, observer: Observer) -> None:
        self.pop(observer, None)


class _Slot(Reactive[T]):
    """Reactive value whose observers run in subscription order.

    The graph stores values with ``assign`` and fires observers with
    ``notify`` once a propagation is complete.
    """

    def __init__(self, initial_value: T) -> None:
        super().__init__(initial_value)
        self._observers = _OrderedObservers()

    def assign(self, value: T) -> None:
        self._value = value

    def notify(self) -> None:
        self._notify_observers()

    @property
    def observer_count(self) -> int:
        return len(self._observers)


class Subscription:
    """Handle returned by ``subscribe``. Calling it stops further delivery.

    Calling it more than once is harmless.
    """

    __slots__ = ("_observer",)

    def __init__(self, observer: Observer) -> None:
        self._observer = observer

    @property
    def active(self) -> bool:
        return self._observer.active

    def __call__(self) -> None:
        self._observer.dispose()

    unsubscribe = __call__


class Node(Generic[T]):
    """Readable, subscribable value inside a :class:`StateGraph`."""

    def __init__(self, graph: "StateGraph", name: str, value: T, rank: int) -> None:
        self.name = name
        self._graph = graph
        self._rx: _Slot[T] = _Slot(value)
        self._published = value
        self._rank = rank
        self._dependents: List[Derived[Any]] = []

    def get(self) -> T:
        return self._rx.value

    @property
    def value(self) -> T:
        return self._rx.value

    def subscribe(self, fn: Subscriber[T]) -> Subscription:
        """Call ``fn`` with the current value now and after every change."""
        observer = self._rx.listen(lambda: self._call(fn, self._published))
        self._call(fn, self._rx.value)
        return Subscription(observer)

    @property
    def subscriber_count(self) -> int:
        return self._rx.observer_count

    def _store(self, value: T) -> None:
        self._rx.assign(value)

    def _publish(self) -> None:
        """Notify subscribers of the current value, unless they already have it."""
        value = self._rx.value
        if _same(self._published, value):
            return
        self._published = value
        self._rx.notify()

    def _call(self, fn: Subscriber[T], value: T) -> None:
        try:
            fn(value)
        except Exception as exc:
            subscriber_name = getattr(fn, "__name__", repr(fn))
            logger.exception(
                f"Subscriber '{subscriber_name}' of '{self.name}' failed",
                exc_info=exc,
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}={self._rx.value!r}>"


class Cell(Node[T]):
    """Writable state container. Every write replaces the whole value."""

    def set(self, value: T) -> None:
        self._graph._write(self, lambda _current: value)

    def update(self, fn: Callable[[T], T]) -> None:
        """Replace the value with ``fn(current)``."""
        self._graph._write(self, fn)


class Derived(Node[T]):
    """Read-only value computed from upstream nodes by a pure function."""

    def __init__(
        self,
        graph: "StateGraph",
        name: str,
        upstream: Tuple[Node[Any], ...],
        fn: Callable[..., T],
    ) -> None:
        self.upstream = upstream
        self._fn = fn
        rank = 1 + max(node._rank for node in upstream)
        super().__init__(graph, name, fn(*(node.get() for node in upstream)), rank)
        for node in upstream:
            node._dependents.append(self)

    def set(self, value: Any) -> None:
        raise TypeError(f"'{self.name}' is derived and cannot be written")

    def _recompute(self) -> bool:
        """Recompute from upstream; True when the value changed."""
        try:
            value = self._fn(*(node.get() for node in self.upstream))
        except Exception as exc:
            logger.exception(f"Derivation '{self.name}' failed, keeping previous value", exc_info=exc)
            return False
        if _same(self.get(), value):
            return False
        self._store(value)
        return True


class StateGraph:
    """Owns a set of cells and derived nodes and orders their notifications."""

    def __init__(self, name: str = "state") -> None:
        self.name = name
        self._nodes: List[Node[Any]] = []
        self._pending: Deque[List[Node[Any]]] = deque()
        self._propagating = False

    def cell(self, initial: T, name: str) -> Cell[T]:
        node: Cell[T] = Cell(self, name, initial, rank=0)
        self._nodes.append(node)
        return node

    def derived(self, upstream: Sequence[Node[Any]] | Node[Any], fn: Callable[..., T], name: str) -> Derived[T]:
        """Declare a derived node over one or more upstream nodes.

        ``fn`` receives the upstream values positionally, in declaration order.
        """
        nodes = (upstream,) if isinstance(upstream, Node) else tuple(upstream)
        if not nodes:
            raise ValueError(f"Derived node '{name}' needs at least one upstream node")
        for node in nodes:
            if node._graph is not self:
                raise ValueError(f"'{node.name}' belongs to another state graph")
        derived = Derived(self, name, nodes, fn)
        self._nodes.append(derived)
        return derived

    @property
    def nodes(self) -> List[Node[Any]]:
        return list(self._nodes)

    @property
    def busy(self) -> bool:
        """True while a notification pass is running."""
        return self._propagating

    def _write(self, cell: Cell[Any], compute: Callable[[Any], Any]) -> None:
        try:
            value = compute(cell.get())
        except Exception as exc:
            logger.exception(f"Update of '{cell.name}' failed, value unchanged", exc_info=exc)
            return
        if _same(cell.get(), value):
            return

        self._pending.append(self._apply(cell, value))
        if self._propagating:
            logger.debug(f"Deferred notifications for '{cell.name}' until the current pass finishes")
            return

        self._propagating = True
        try:
            while self._pending:
                for node in self._pending.popleft():
                    node._publish()
        finally:
            self._propagating = False
            self._pending.clear()

    def _apply(self, cell: Cell[Any], value: Any) -> List[Node[Any]]:
        """Store ``value`` and recompute dependents; returns the changed nodes."""
        cell._store(value)
        changed: List[Node[Any]] = [cell]
        changed_ids: Set[int] = {id(cell)}
        for node in self._downstream(cell):
            if any(id(up) in changed_ids for up in node.upstream) and node._recompute():
                changed.append(node)
                changed_ids.add(id(node))
        return changed

    def _downstream(self, cell: Cell[Any]) -> List[Derived[Any]]:
        """Derived nodes reachable from ``cell``, in topological order."""
        seen: Dict[int, Derived[Any]] = {}
        stack: List[Node[Any]] = [cell]
        while stack:
            node = stack.pop()
            for dependent in node._dependents:
                if id(dependent) not in seen:
                    seen[id(dependent)] = dependent
                    stack.append(dependent)
        order = {id(node): index for index, node in enumerate(self._nodes)}
        return sorted(seen.values(), key=lambda node: (node._rank, order[id(node)]))


class DeprecatedAlias(Generic[T]):
    """Old name for a cell. Reads and writes go straight to the canonical cell."""

    def __init__(self, target: Cell[T], name: str) -> None:
        self._target = target
        self.name = name
        self._warned = False

    def _warn(self) -> None:
        if self._warned:
            return
        self._warned = True
        warnings.warn(
            f"'{self.name}' is deprecated, use '{self._target.name}' instead",
            DeprecationWarning,
            stacklevel=3,
        )

    @property
    def target(self) -> Cell[T]:
        return self._target

    def get(self) -> T:
        self._warn()
        return self._target.get()

    def set(self, value: T) -> None:
        self._warn()
        self._target.set(value)

    def update(self, fn: Callable[[T], T]) -> None:
        self._warn()
        self._target.update(fn)

    def subscribe(self, fn: Subscriber[T]) -> Subscription:
        self._warn()
        return self._target.subscribe(fn)
