from dataclasses import dataclass, replace

from fluxion import ManualScheduler, Store, dedup, on_next_frame, select

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Creating a store and handlers")
print("-" * 100)
print()


@dataclass(frozen=True)
class Counter:
    count: int = 0
    label: str = "clicks"


# State lives in exactly one place, and is replaced rather than mutated.
store = Store(Counter())

# Handlers lift pure transition functions into callables that update the store.
increment = store.create_handler(lambda state, by=1: replace(state, count=state.count + by))
rename = store.create_handler(lambda state, label: replace(state, label=label))

# Subscribing immediately prints the current state, then every change.
unsubscribe = store.subscribe(lambda state: print(f"State: {state}"))
increment()
increment(10)
unsubscribe()

increment()  # Nothing printed, the consumer is gone

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Building a pipeline")
print("-" * 100)
print()

# Only care about the count, and only when it actually changes.
watch_count = store.subscribe.with_(select(lambda s: s.count)).with_(dedup())
watch_count(lambda count: print(f"Count is now {count}"))

rename("taps")  # Nothing printed, the count did not change
increment()

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Rendering once per frame")
print("-" * 100)
print()

# A manual scheduler stands in for a real frame clock here.
frames = ManualScheduler()
store.subscribe.with_(on_next_frame(frames))(lambda s: print(f"Render frame: {s.count}"))

for _ in range(5):
    increment()

frames.flush()  # Renders once, with the latest count
