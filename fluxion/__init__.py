"""
Fluxion - Single-Store Reactive State Delivery
==============================================

One state cell, pure transition handlers, and a composable pipeline of consumer
operators (dedup, throttle, coeffect injection) that adapt the stream of state
snapshots to each consumer's needs.
"""

from .coeffect import Coeffect, make_coeffect
from .config import CONFIG, Settings
from .configurable import ConfigurableFunction, configurable
from .errors import ConsumerError, FluxionError
from .operators import (
    deep_equal,
    dedup,
    identical,
    on_next_frame,
    on_next_tick,
    only_if,
    select,
    shallow_equal,
    throttle,
)
from .registry import CallbackRegistry
from .scheduling import FrameScheduler, LoopScheduler, ManualScheduler, Ticker, immediate
from .store import Handler, Store, log_consumer_error

__version__ = "0.1.0"

__all__ = [
    # Store
    "Store",
    "Handler",
    "CallbackRegistry",
    "log_consumer_error",
    # Pipeline builder
    "ConfigurableFunction",
    "configurable",
    # Operators
    "dedup",
    "throttle",
    "on_next_tick",
    "on_next_frame",
    "select",
    "only_if",
    "identical",
    "shallow_equal",
    "deep_equal",
    # Coeffects
    "Coeffect",
    "make_coeffect",
    # Schedulers
    "ManualScheduler",
    "LoopScheduler",
    "FrameScheduler",
    "Ticker",
    "immediate",
    # Configuration
    "Settings",
    "CONFIG",
    # Exceptions
    "FluxionError",
    "ConsumerError",
]
