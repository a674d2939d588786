"""
Fluxion Store - Single-Cell Reactive State
==========================================

A ``Store`` owns exactly one state value. The value is never mutated in place:
handlers compute a replacement with a pure transition function, swap it in, and
broadcast it to every subscribed consumer before returning.

Basic Usage
-----------

```python
from fluxion import Store

store = Store({"count": 0})

increment = store.create_handler(lambda state, by=1: {**state, "count": state["count"] + by})

store.subscribe(lambda state: print("count is", state["count"]))  # prints 0 now
increment()   # prints 1
increment(5)  # prints 6
```

Delivery Guarantees
-------------------

- **Replay on subscribe**: ``subscribe(consumer)`` calls ``consumer(state)`` once
  with the current state before it returns.
- **Synchronous, ordered broadcast**: a handler call delivers the new state to
  every consumer in registration order before the handler returns.
- **Atomic transitions**: if the transition function raises, the state is left
  untouched, nothing is broadcast and the exception reaches the handler's caller.
- **Isolated consumers**: a consumer that raises is reported to the store's
  ``on_error`` hook as a ``ConsumerError``; later consumers still receive the value.

Re-entrancy
-----------

A consumer may call a handler while a broadcast is running. That nested call
broadcasts synchronously and completes before the outer broadcast resumes, so
consumers later in the outer loop receive the outer (older) state after the
nested one. Effects that feed back into the store should be wrapped with
``on_next_tick()`` so each feedback call runs from the scheduler instead of
recursing on the stack.

Pipelines
---------

``subscribe`` is a ``ConfigurableFunction``; operators from ``fluxion.operators``
can be chained onto it:

```python
from fluxion import dedup, select

watch_count = store.subscribe.with_(select(lambda s: s["count"])).with_(dedup())
unsubscribe = watch_count(lambda count: print("count changed:", count))
```

See Also
--------

- ``fluxion.operators``: dedup, throttle, select and friends
- ``fluxion.coeffect``: injecting external values at delivery time
"""

import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from .config import CONFIG
from .configurable import configurable
from .errors import ConsumerError
from .registry import CallbackRegistry, Consumer, ErrorHook, release

S = TypeVar("S")

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


def log_consumer_error(error: ConsumerError) -> None:
    """Default error hook: log the failure with its traceback."""
    if CONFIG.log_consumer_errors:
        logger.error("Error in store consumer: %s", error, exc_info=error.error)


class Handler(Generic[S]):
    """
    A transition function bound to a store.

    Calling the handler with ``*args`` replaces the store's state with
    ``transition(state, *args)`` and broadcasts it.
    """

    def __init__(self, store: "Store[S]", transition: Callable[..., S]) -> None:
        self._store = store
        self.transition = transition
        self.__name__ = getattr(transition, "__name__", type(transition).__name__)

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self._store._apply(self.transition, args, kwargs)

    def __repr__(self) -> str:
        return f"<Handler {self.__name__}>"


class Store(Generic[S]):
    """Owns the canonical state and broadcasts every replacement."""

    def __init__(self, initial_state: S, on_error: Optional[ErrorHook] = None) -> None:
        if on_error is None:
            on_error = log_consumer_error
        elif not callable(on_error):
            raise TypeError(f"on_error must be callable, got {on_error!r}")
        self._state = initial_state
        self._consumers = CallbackRegistry()
        self._on_error = on_error

    @property
    def state(self) -> S:
        """The current state. Read-only; use a handler to replace it."""
        return self._state

    @configurable
    def subscribe(self, consumer: Consumer) -> Unsubscribe:
        """
        Register ``consumer`` and immediately deliver the current state to it.

        Returns a zero-argument function that unregisters the consumer; calling
        it more than once is harmless. A failure during the replay delivery is
        handled like any other consumer failure.
        """
        if not callable(consumer):
            raise TypeError(f"Consumer must be callable, got {consumer!r}")
        self._consumers.add(consumer)
        self._deliver(consumer, self._state)

        def unsubscribe() -> None:
            self.unsubscribe(consumer)

        return unsubscribe

    def unsubscribe(self, consumer: Consumer) -> None:
        """
        Remove ``consumer``. Unknown or already removed consumers are ignored.

        Operators wrapped around the consumer get to drop their own bookkeeping,
        so a coeffect trigger stops reaching it.
        """
        if self._consumers.discard(consumer):
            release(consumer)

    def create_handler(self, transition: Callable[..., S]) -> Handler[S]:
        """Lift a pure ``(state, *args) -> state`` function into a handler."""
        if not callable(transition):
            raise TypeError(f"Transition must be callable, got {transition!r}")
        return Handler(self, transition)

    @property
    def subscriber_count(self) -> int:
        return len(self._consumers)

    def _apply(self, transition: Callable[..., S], args: tuple, kwargs: dict) -> None:
        # Transition errors propagate before anything is replaced
        new_state = transition(self._state, *args, **kwargs)
        self._state = new_state
        self._consumers.notify_all(new_state, on_error=self._report)

    def _deliver(self, consumer: Consumer, value: S) -> None:
        try:
            consumer(value)
        except Exception as e:
            self._report(ConsumerError(consumer, value, e))

    def _report(self, error: ConsumerError) -> None:
        self._on_error(error)

    def __repr__(self) -> str:
        return f"Store(state={self._state!r}, subscribers={len(self._consumers)})"
