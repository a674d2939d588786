"""
Callback Registry
=================

Ordered set of consumers with an isolated broadcast loop.

Consumers are kept in registration order and broadcast to synchronously. The
loop iterates over a snapshot of the list, so a consumer that subscribes or
unsubscribes during a broadcast affects the next broadcast, not the current one.
A consumer that raises is reported through ``on_error`` and the loop carries on.

Operator wrappers point at the consumer they wrap through ``__wrapped__``, and a
wrapper that holds per-consumer resources elsewhere exposes an ``on_release``
hook. ``release`` walks that chain when a consumer leaves the store.
"""

from typing import Any, Callable, Iterator, List

from .errors import ConsumerError

Consumer = Callable[..., Any]
ErrorHook = Callable[[ConsumerError], Any]


def release(consumer: Consumer) -> None:
    """Call every ``on_release`` hook along the ``__wrapped__`` chain of ``consumer``."""
    seen = set()
    current: Any = consumer
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        hook = getattr(current, "on_release", None)
        if hook is not None:
            hook()
        current = getattr(current, "__wrapped__", None)


class CallbackRegistry:
    """Holds delivery callbacks and broadcasts values to them."""

    __slots__ = ("_consumers",)

    def __init__(self) -> None:
        self._consumers: List[Consumer] = []

    def add(self, consumer: Consumer) -> None:
        """Append a consumer. Registering the same callable twice delivers twice."""
        self._consumers.append(consumer)

    def discard(self, consumer: Consumer) -> bool:
        """
        Remove every registration of ``consumer``.

        Returns True if anything was removed. Unknown consumers are ignored.
        """
        remaining = [c for c in self._consumers if c is not consumer]
        removed = len(remaining) != len(self._consumers)
        self._consumers = remaining
        return removed

    def notify_all(self, *values: Any, on_error: ErrorHook) -> None:
        """Call every consumer with ``values``, containing per-consumer failures."""
        for consumer in list(self._consumers):
            try:
                consumer(*values)
            except Exception as e:
                on_error(ConsumerError(consumer, values[0] if len(values) == 1 else values, e))

    def clear(self) -> None:
        self._consumers = []

    def __contains__(self, consumer: object) -> bool:
        return any(c is consumer for c in self._consumers)

    def __iter__(self) -> Iterator[Consumer]:
        return iter(list(self._consumers))

    def __len__(self) -> int:
        return len(self._consumers)
