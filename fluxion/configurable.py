"""
Fluxion Configurable Functions - Chainable Precomposition
=========================================================

A ``ConfigurableFunction`` wraps a one-argument callable ``f`` and exposes
``with_(transformer)``, which returns a new ``ConfigurableFunction`` computing
``f(transformer(x))``. Chaining reads left to right as the order in which a
value travels back out through the transformers:

```python
subscribe = store.subscribe.with_(select(lambda s: s.count)).with_(dedup())
subscribe(render)
# render <- dedup wrapper <- select wrapper <- store broadcast
```

The first transformer in the chain is applied last, so it ends up outermost
and is the one actually registered with the store. Each call to the resulting
function runs every transformer again, which gives every subscription its own
operator bookkeeping.

``>>`` is an alias for ``with_``: ``store.subscribe >> dedup() >> throttle(s)``.

The ``configurable`` descriptor turns a method into a ``ConfigurableFunction``
bound to its instance.
"""

from functools import update_wrapper
from typing import Any, Callable, Generic, Optional, Type, TypeVar

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")


class ConfigurableFunction(Generic[A, B]):
    """A one-argument callable that can be precomposed with transformers."""

    def __init__(self, fn: Callable[[A], B]) -> None:
        if not callable(fn):
            raise TypeError(f"ConfigurableFunction requires a callable, got {fn!r}")
        self._fn = fn
        update_wrapper(self, fn)

    def __call__(self, arg: A) -> B:
        return self._fn(arg)

    def with_(self, transformer: Callable[[C], A]) -> "ConfigurableFunction[C, B]":
        """Return ``c => self(transformer(c))`` as a new configurable function."""
        if not callable(transformer):
            raise TypeError(f"Transformer must be callable, got {transformer!r}")
        fn = self._fn

        def composed(arg: C) -> B:
            return fn(transformer(arg))

        result: ConfigurableFunction[C, B] = ConfigurableFunction(composed)
        return result

    def __rshift__(self, transformer: Callable[[C], A]) -> "ConfigurableFunction[C, B]":
        return self.with_(transformer)

    def __repr__(self) -> str:
        return f"ConfigurableFunction({self._fn!r})"


class configurable(Generic[A, B]):
    """
    Descriptor exposing a method as a bound ``ConfigurableFunction``.

    ```python
    class Store:
        @configurable
        def subscribe(self, consumer): ...

    store.subscribe.with_(dedup())(consumer)
    ```
    """

    def __init__(self, method: Callable[[Any, A], B]) -> None:
        self._method = method
        self.attr_name: Optional[str] = None
        update_wrapper(self, method)

    def __set_name__(self, owner: Type, name: str) -> None:
        self.attr_name = name

    def __get__(self, instance: Optional[object], owner: Type) -> Any:
        if instance is None:
            return self
        return ConfigurableFunction(self._method.__get__(instance, owner))
