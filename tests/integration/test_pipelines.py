"""Integration tests for stores combined with operator pipelines."""

import asyncio
from dataclasses import dataclass, replace

import pytest

from fluxion import (
    ManualScheduler,
    Store,
    dedup,
    make_coeffect,
    on_next_frame,
    on_next_tick,
    select,
    throttle,
)


@dataclass(frozen=True)
class Todos:
    items: tuple = ()
    filter: str = "all"
    saving: bool = False


def add_todo(state, text):
    return replace(state, items=state.items + (text,))


def set_filter(state, value):
    return replace(state, filter=value)


def mark_saving(state, saving):
    return replace(state, saving=saving)


@pytest.fixture
def todos():
    return Store(Todos())


@pytest.mark.integration
@pytest.mark.store
@pytest.mark.operators
def test_selected_slice_is_deduplicated(todos):
    """Changing an unrelated field does not reach a consumer of the items slice"""
    received = []
    add = todos.create_handler(add_todo)
    filt = todos.create_handler(set_filter)

    todos.subscribe.with_(select(lambda s: s.items)).with_(dedup())(received.append)
    filt("done")
    add("write tests")
    filt("all")

    assert received == [(), ("write tests",)]


@pytest.mark.integration
@pytest.mark.store
@pytest.mark.operators
def test_handlers_in_sequence_are_observed_in_order(todos):
    """Every consumer sees h1's state before anyone sees h2's"""
    log = []
    add = todos.create_handler(add_todo)
    todos.subscribe(lambda s: log.append(("a", len(s.items))))
    todos.subscribe(lambda s: log.append(("b", len(s.items))))
    log.clear()

    add("one")
    add("two")

    assert log == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]


@pytest.mark.integration
@pytest.mark.store
@pytest.mark.operators
def test_render_pipeline_coalesces_per_frame(todos):
    """A frame-throttled renderer sees only the freshest state each frame"""
    frames = ManualScheduler()
    rendered = []
    add = todos.create_handler(add_todo)

    todos.subscribe.with_(dedup()).with_(on_next_frame(frames))(
        lambda s: rendered.append(s.items)
    )
    frames.flush()
    add("a")
    add("b")
    add("c")

    assert rendered == [()]

    frames.flush()

    assert rendered == [(), ("a", "b", "c")]


@pytest.mark.integration
@pytest.mark.store
@pytest.mark.operators
def test_dedup_after_throttle_suppresses_unchanged_frames(todos):
    """Throttling first, then dedup, skips frames whose value did not change"""
    frames = ManualScheduler()
    rendered = []
    filt = todos.create_handler(set_filter)

    todos.subscribe.with_(throttle(frames)).with_(select(lambda s: s.filter)).with_(
        dedup()
    )(rendered.append)
    frames.flush()
    filt("done")
    filt("all")
    frames.flush()

    assert rendered == ["all"]


@pytest.mark.integration
@pytest.mark.store
@pytest.mark.coeffect
def test_time_coeffect_rerenders_without_touching_state(todos):
    """A clock coeffect refreshes consumers while state stays the same"""
    now = iter([100, 101, 102, 103])
    clock, tick = make_coeffect(lambda: next(now))
    rendered = []

    todos.subscribe.with_(clock)(lambda s, t: rendered.append((len(s.items), t)))
    tick()
    todos.create_handler(add_todo)("x")
    tick()

    assert rendered == [(0, 100), (0, 101), (1, 102), (1, 103)]
    assert todos.state == Todos(items=("x",))


@pytest.mark.integration
@pytest.mark.store
@pytest.mark.coeffect
def test_coeffect_combined_with_dedup_and_throttle(todos):
    """Coeffect triggers flow through operators chained after the coeffect"""
    frames = ManualScheduler()
    clock, tick = make_coeffect(lambda: "12:00")
    rendered = []

    todos.subscribe.with_(clock).with_(dedup()).with_(throttle(frames))(
        lambda s, t: rendered.append((s.filter, t))
    )
    tick()
    tick()
    frames.flush()

    assert rendered == [("all", "12:00")]


@pytest.mark.integration
@pytest.mark.store
def test_failing_renderer_does_not_block_effects():
    """Consumer isolation holds for full pipelines"""
    errors = []
    store = Store(0, on_error=errors.append)
    seen = []
    inc = store.create_handler(lambda s: s + 1)

    store.subscribe.with_(dedup())(lambda s: 1 / 0)
    store.subscribe(seen.append)

    inc()

    assert seen == [0, 1]
    assert len(errors) == 2
    assert all(isinstance(e.__cause__, ZeroDivisionError) for e in errors)


@pytest.mark.integration
@pytest.mark.store
def test_effect_feedback_through_next_tick_avoids_recursion():
    """Effects that call handlers run from the loop, one step per iteration"""

    async def scenario():
        store = Store(Todos())
        save = store.create_handler(mark_saving)
        add = store.create_handler(add_todo)
        depth = []

        def persist(state):
            depth.append(len(state.items))
            if state.items and not state.saving:
                save(True)

        store.subscribe.with_(on_next_tick())(persist)
        add("a")
        add("b")
        assert depth == []
        for _ in range(3):
            await asyncio.sleep(0)
        return store.state, depth

    state, depth = asyncio.run(scenario())

    assert state.saving is True
    assert state.items == ("a", "b")
    assert depth == [2, 2]
