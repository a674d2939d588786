"""
Fluxion Coeffects - External Values Injected at Delivery Time
=============================================================

Some consumers need values that do not belong in the store's state: the current
time, the window size, a random seed. A coeffect pairs a ``producer`` of such a
value with two things:

- a transformer that appends a freshly produced value to every delivery, and
- a ``trigger`` that re-delivers the last upstream values of every consumer it
  wrapped, paired with a new produced value.

```python
clock, tick = make_coeffect(time.time)

unsubscribe = store.subscribe.with_(clock)(lambda state, now: print(state, now))
Ticker(1.0, tick).start()   # once a second, re-render with the new time
unsubscribe()               # later ticks no longer reach the consumer
```

Each wrapped consumer tracks its own most recent upstream values. A trigger
skips any consumer that has not received an upstream delivery yet: there is
nothing to pair the produced value with, and nothing is buffered for later.

A trigger is a broadcast of its own, so it isolates consumers the way the store
does: a consumer that raises is reported to ``on_error`` as a ``ConsumerError``
and the remaining consumers are still delivered to.
"""

import logging
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from .errors import ConsumerError
from .registry import Consumer, ErrorHook
from .store import log_consumer_error

V = TypeVar("V")

logger = logging.getLogger(__name__)


class _Slot:
    """Per-consumer bookkeeping: the wrapped consumer and its last upstream values."""

    __slots__ = ("consumer", "values")

    def __init__(self, consumer: Consumer) -> None:
        self.consumer = consumer
        self.values: Optional[Tuple[Any, ...]] = None

    @property
    def ready(self) -> bool:
        return self.values is not None


class Coeffect(Generic[V]):
    """
    A producer of an external value plus the transformer and trigger built on it.

    ``transform`` and ``trigger`` are plain bound methods, so they can be handed
    around on their own (``make_coeffect`` returns exactly those two).

    The consumer returned by ``transform`` carries an ``on_release`` hook. The
    store calls it on unsubscribe, which drops the slot so triggers stop
    reaching that consumer.
    """

    def __init__(
        self, producer: Callable[[], V], on_error: Optional[ErrorHook] = None
    ) -> None:
        if not callable(producer):
            raise TypeError(f"Producer must be callable, got {producer!r}")
        if on_error is None:
            on_error = log_consumer_error
        elif not callable(on_error):
            raise TypeError(f"on_error must be callable, got {on_error!r}")
        self.producer = producer
        self._on_error = on_error
        self._slots: List[_Slot] = []

    @property
    def size(self) -> int:
        """Number of consumers currently tracked."""
        return len(self._slots)

    def transform(self, consumer: Consumer) -> Consumer:
        """Wrap ``consumer(*values, produced)`` into ``wrapped(*values)``."""
        slot = _Slot(consumer)
        self._slots.append(slot)
        producer = self.producer

        def with_coeffect(*values: Any) -> None:
            slot.values = values
            consumer(*values, producer())

        def on_release() -> None:
            self._slots = [s for s in self._slots if s is not slot]

        with_coeffect.__wrapped__ = consumer
        with_coeffect.on_release = on_release
        return with_coeffect

    def trigger(self) -> None:
        """Re-deliver every ready consumer's last values with a fresh produced value."""
        ready = [slot for slot in self._slots if slot.ready]
        if not ready:
            logger.debug("Coeffect trigger skipped: no consumer has upstream values yet")
            return

        produced = self.producer()
        for slot in ready:
            values = slot.values + (produced,)
            try:
                slot.consumer(*values)
            except Exception as e:
                self._on_error(ConsumerError(slot.consumer, values, e))

    def discard(self, consumer: Consumer) -> None:
        """Stop tracking ``consumer``. Unknown consumers are ignored."""
        self._slots = [slot for slot in self._slots if slot.consumer is not consumer]

    __call__ = transform

    def __repr__(self) -> str:
        return f"Coeffect({self.producer!r}, consumers={len(self._slots)})"


def make_coeffect(
    producer: Callable[[], V], on_error: Optional[ErrorHook] = None
) -> Tuple[Callable[[Consumer], Consumer], Callable[[], None]]:
    """Return the ``(transformer, trigger)`` pair for ``producer``."""
    coeffect = Coeffect(producer, on_error=on_error)
    return coeffect.transform, coeffect.trigger
