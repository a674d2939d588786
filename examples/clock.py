"""
A terminal clock: the time is a coeffect, not part of the store's state.

Runs for a few seconds, re-rendering once a second from a Ticker and whenever
the state changes.
"""

import asyncio
import time
from dataclasses import dataclass, replace

from fluxion import Store, Ticker, dedup, make_coeffect, on_next_tick


@dataclass(frozen=True)
class Alarm:
    message: str = "waiting"
    rings: int = 0


def render(state: Alarm, now: float) -> None:
    print(f"[{time.strftime('%H:%M:%S', time.localtime(now))}] {state.message} ({state.rings})")


async def main() -> None:
    store = Store(Alarm())
    ring = store.create_handler(lambda s: replace(s, message="ring!", rings=s.rings + 1))

    clock, tick = make_coeffect(time.time)
    store.subscribe.with_(clock).with_(dedup())(render)

    # Effects react to state on the next loop iteration instead of recursing
    def snooze_after_three(state: Alarm) -> None:
        if 0 < state.rings < 3:
            ring()

    store.subscribe.with_(on_next_tick())(snooze_after_three)

    ticker = Ticker(1.0, tick)
    ticker.start()
    await asyncio.sleep(1.5)
    ring()
    await asyncio.sleep(2)
    ticker.stop()


if __name__ == "__main__":
    asyncio.run(main())
