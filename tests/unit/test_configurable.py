"""Unit tests for ConfigurableFunction and the configurable descriptor."""

import pytest

from fluxion import ConfigurableFunction, Store, configurable


def tag(label, log):
    """Transformer that logs when it wraps and when values pass through."""

    def transform(consumer):
        log.append(("wrap", label))

        def tagged(*values):
            log.append(("pass", label))
            consumer(*values)

        return tagged

    return transform


@pytest.mark.unit
@pytest.mark.configurable
def test_with_precomposes_transformer():
    """f.with_(t)(c) == f(t(c))"""
    f = ConfigurableFunction(lambda x: x * 10)

    g = f.with_(lambda x: x + 1)

    assert g(1) == 20
    assert f(1) == 10


@pytest.mark.unit
@pytest.mark.configurable
def test_chained_with_applies_last_transformer_first():
    """f.with_(t1).with_(t2)(c) == f(t1(t2(c)))"""
    f = ConfigurableFunction(lambda x: x)

    g = f.with_(lambda x: f"t1({x})").with_(lambda x: f"t2({x})")

    assert g("c") == "t1(t2(c))"


@pytest.mark.unit
@pytest.mark.configurable
def test_rshift_is_alias_for_with():
    f = ConfigurableFunction(lambda x: [x])

    g = f >> (lambda x: x + 1) >> (lambda x: x * 2)

    assert g(3) == [7]


@pytest.mark.unit
@pytest.mark.configurable
def test_with_rejects_non_callable():
    with pytest.raises(TypeError):
        ConfigurableFunction(lambda x: x).with_(None)
    with pytest.raises(TypeError):
        ConfigurableFunction(3)


@pytest.mark.unit
@pytest.mark.configurable
def test_store_subscribe_is_configurable():
    """Values travel through the operators in chain order"""
    store = Store(0)
    log = []
    received = []

    subscribe = store.subscribe.with_(tag("first", log)).with_(tag("second", log))
    subscribe(received.append)

    # Wrapping happens innermost first; values pass outermost first
    assert log == [
        ("wrap", "second"),
        ("wrap", "first"),
        ("pass", "first"),
        ("pass", "second"),
    ]
    assert received == [0]


@pytest.mark.unit
@pytest.mark.configurable
def test_configured_subscribe_returns_working_unsubscriber():
    """The unsubscriber removes the outermost wrapper from the store"""
    store = Store(0)
    received = []
    inc = store.create_handler(lambda s: s + 1)

    unsubscribe = store.subscribe.with_(tag("t", []))(received.append)
    inc()
    unsubscribe()
    inc()

    assert received == [0, 1]
    assert store.subscriber_count == 0


@pytest.mark.unit
@pytest.mark.configurable
def test_configurable_descriptor_binds_to_instance():
    """A configurable method is bound and chainable"""

    class Greeter:
        def __init__(self, greeting):
            self.greeting = greeting

        @configurable
        def greet(self, name):
            """Return a greeting."""
            return f"{self.greeting}, {name}"

    hello = Greeter("Hello")

    assert hello.greet("Ada") == "Hello, Ada"
    assert hello.greet.with_(str.upper)("ada") == "Hello, ADA"
    assert isinstance(Greeter.greet, configurable)
    assert Greeter.greet.attr_name == "greet"
    assert hello.greet.__doc__ == "Return a greeting."
