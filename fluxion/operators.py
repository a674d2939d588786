"""
Fluxion Operators - Consumer Transformers
=========================================

An operator (transformer) takes a consumer and returns a new consumer that adds
some behaviour before delegating to it. Operators are meant to be chained onto
``Store.subscribe`` with ``with_``:

```python
render_count = (
    store.subscribe
    .with_(select(lambda s: s.count))
    .with_(dedup())
    .with_(on_next_frame())
)
render_count(draw)
```

Each call of an operator factory (``dedup()``, ``throttle(s)``) returns a
transformer, and each application of that transformer creates fresh private
bookkeeping. Two consumers wrapped by the same transformer never share a
"last value" or "pending" slot.

Every wrapper keeps the consumer it wraps as ``__wrapped__`` so that
``Store.unsubscribe`` can reach operators further down the chain.

Operators:
    dedup: drop a delivery equal to the one before it
    throttle: coalesce deliveries into one per scheduling window
    on_next_tick / on_next_frame: throttle bound to the asyncio schedulers
    select: project the incoming values
    only_if: forward only when a predicate holds

Equality strategies for dedup:
    identical: element-wise ``is``
    shallow_equal: element-wise ``is`` or ``==`` (default)
    deep_equal: whole-tuple ``==``
"""

import logging
from typing import Any, Callable, Optional, Tuple

from .registry import Consumer
from .scheduling import FrameScheduler, LoopScheduler, Scheduler

logger = logging.getLogger(__name__)

Transformer = Callable[[Consumer], Consumer]
Equality = Callable[[Tuple[Any, ...], Tuple[Any, ...]], bool]

_NOTHING: Any = object()


# ============================================================================
# Equality strategies
# ============================================================================


def identical(previous: Tuple[Any, ...], current: Tuple[Any, ...]) -> bool:
    """Same length and every element is the same object."""
    return len(previous) == len(current) and all(
        a is b for a, b in zip(previous, current)
    )


def shallow_equal(previous: Tuple[Any, ...], current: Tuple[Any, ...]) -> bool:
    """Same length and every element is the same object or compares equal."""
    return len(previous) == len(current) and all(
        a is b or a == b for a, b in zip(previous, current)
    )


def deep_equal(previous: Tuple[Any, ...], current: Tuple[Any, ...]) -> bool:
    """Plain tuple equality, recursing through nested containers."""
    return previous == current


# ============================================================================
# Dedup
# ============================================================================


def dedup(equals: Equality = shallow_equal) -> Transformer:
    """
    Forward a delivery only if it differs from the previous forwarded one.

    The first delivery always goes through. ``equals(previous, current)``
    receives the argument tuples and decides whether they are the same.
    """

    def transform(consumer: Consumer) -> Consumer:
        last: Any = _NOTHING

        def deduplicated(*values: Any) -> None:
            nonlocal last
            if last is not _NOTHING and equals(last, values):
                return
            last = values
            consumer(*values)

        deduplicated.__wrapped__ = consumer
        return deduplicated

    return transform


# ============================================================================
# Throttle
# ============================================================================


def throttle(scheduler: Scheduler) -> Transformer:
    """
    Coalesce deliveries so the consumer runs at most once per scheduling window.

    Every incoming call records its arguments as the latest. The first call of a
    window asks ``scheduler`` for a flush; when the flush runs it delivers the
    latest recorded arguments once. Intermediate values are dropped.

    The pending flag is cleared before delivering, so a consumer that feeds a new
    value back in during delivery opens the next window instead of being lost.
    """

    def transform(consumer: Consumer) -> Consumer:
        latest: Tuple[Any, ...] = ()
        scheduled = False

        def flush() -> None:
            nonlocal latest, scheduled
            values = latest
            latest = ()
            scheduled = False
            consumer(*values)

        def throttled(*values: Any) -> None:
            nonlocal latest, scheduled
            latest = values
            if scheduled:
                return
            scheduled = True
            logger.debug("Scheduling delivery to %r", consumer)
            scheduler(flush)

        throttled.__wrapped__ = consumer
        return throttled

    return transform


def on_next_tick(scheduler: Optional[Scheduler] = None) -> Transformer:
    """Throttle to the next event-loop iteration. Used for effects."""
    return throttle(scheduler if scheduler is not None else LoopScheduler())


def on_next_frame(scheduler: Optional[Scheduler] = None) -> Transformer:
    """Throttle to the next frame boundary. Used for rendering."""
    return throttle(scheduler if scheduler is not None else FrameScheduler())


# ============================================================================
# Projection and filtering
# ============================================================================


def select(*selectors: Callable[..., Any]) -> Transformer:
    """
    Replace the incoming values with ``tuple(sel(*values) for sel in selectors)``.

    Chain before ``dedup()`` to compare a slice of the state rather than all of it.
    """
    if not selectors:
        raise ValueError("select() needs at least one selector")

    def transform(consumer: Consumer) -> Consumer:
        def selected(*values: Any) -> None:
            consumer(*(selector(*values) for selector in selectors))

        selected.__wrapped__ = consumer
        return selected

    return transform


def only_if(predicate: Callable[..., Any]) -> Transformer:
    """Forward a delivery only when ``predicate(*values)`` is truthy."""

    def transform(consumer: Consumer) -> Consumer:
        def filtered(*values: Any) -> None:
            if predicate(*values):
                consumer(*values)

        filtered.__wrapped__ = consumer
        return filtered

    return transform
