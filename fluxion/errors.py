"""Exception types raised or reported by the delivery pipeline."""

from typing import Any, Callable


class FluxionError(Exception):
    """Base class for fluxion errors."""

    pass


class ConsumerError(FluxionError):
    """
    A consumer raised while a store was broadcasting.

    Never raised to the handler's caller. The store wraps the original exception
    (available as ``__cause__``) and passes this object to its error hook, then
    keeps delivering to the remaining consumers.
    """

    def __init__(self, consumer: Callable[..., Any], value: Any, error: BaseException):
        self.consumer = consumer
        self.value = value
        self.error = error
        name = getattr(consumer, "__qualname__", None) or repr(consumer)
        super().__init__(f"Consumer {name} failed: {error!r}")
        self.__cause__ = error
