"""
Shared pytest fixtures and configuration for Fluxion tests.
"""

import pytest

from fluxion import CONFIG, ManualScheduler, Settings, Store


class Recorder:
    """Consumer that records every call's positional arguments."""

    def __init__(self):
        self.calls = []

    def __call__(self, *values):
        self.calls.append(values)

    @property
    def values(self):
        """Calls that carried a single value, unwrapped."""
        return [call[0] if len(call) == 1 else call for call in self.calls]


@pytest.fixture(autouse=True)
def reset_config():
    """Restore global settings after each test to prevent state leakage."""
    saved = Settings(**vars(CONFIG))
    yield
    for name, value in vars(saved).items():
        setattr(CONFIG, name, value)


@pytest.fixture
def errors():
    """Collects ConsumerErrors reported by a store."""
    return []


@pytest.fixture
def store(errors):
    """A fresh counter store whose consumer errors land in ``errors``."""
    return Store({"count": 0, "label": "counter"}, on_error=errors.append)


@pytest.fixture
def scheduler():
    """A scheduler that only fires on explicit flush()."""
    return ManualScheduler()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_recorder():
    """Factory for additional independent recorders."""
    return Recorder
