"""Run engine handlers on the event loop and publish what they yield.

Each dispatched intent gets one snapshot and one task. Events reach
subscribers in yield order; follow-up intents are dispatched again as they
arrive, so they see a snapshot taken after the preceding events were applied.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from .events import IntentFailed, OrchestrationEvent
from .intents import Concurrency

if TYPE_CHECKING:
    from mapflow.domain.ports import MapsSnapshot, StateProjection

    from .engine import OrchestrationEngine
    from .intents import AnyIntent

type Listener = Callable[[OrchestrationEvent], None]

log = getLogger(__name__)


class IntentDispatcher:
    def __init__(self, engine: OrchestrationEngine, projection: StateProjection) -> None:
        self._engine = engine
        self._projection = projection
        self._listeners: list[Listener] = []
        self._in_flight: defaultdict[type, set[asyncio.Task[None]]] = defaultdict(set)
        self._generations: defaultdict[type, int] = defaultdict(int)
        self._tasks: set[asyncio.Task[None]] = set()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, intent: AnyIntent) -> asyncio.Task[None] | None:
        """Schedule ``intent``; ``None`` when an exhaust intent is already running.

        Must be called with a running event loop.
        """

        kind = type(intent)
        if intent.concurrency is Concurrency.EXHAUST and self._in_flight[kind]:
            log.debug("Ignoring %s: previous one still in flight", kind.__name__)
            return None

        self._generations[kind] += 1
        generation = self._generations[kind]
        snapshot = self._projection.snapshot()
        task = asyncio.create_task(
            self._run(intent, snapshot, generation),
            name=f"{kind.__name__}#{generation}",
        )
        self._in_flight[kind].add(task)
        self._tasks.add(task)
        task.add_done_callback(self._in_flight[kind].discard)
        task.add_done_callback(self._tasks.discard)
        return task

    async def join(self) -> None:
        """Wait until every dispatched intent and its follow-ups have finished."""

        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def run(self, *intents: AnyIntent) -> list[OrchestrationEvent]:
        """Dispatch ``intents`` and collect every event published until idle."""

        collected: list[OrchestrationEvent] = []
        unsubscribe = self.subscribe(collected.append)
        try:
            for intent in intents:
                self.dispatch(intent)
            await self.join()
        finally:
            unsubscribe()
        return collected

    def _is_current(self, intent: AnyIntent, generation: int) -> bool:
        if intent.concurrency is not Concurrency.SWITCH:
            return True
        return self._generations[type(intent)] == generation

    async def _run(self, intent: AnyIntent, snapshot: MapsSnapshot, generation: int) -> None:
        stream = self._engine.handle(intent, snapshot)
        try:
            async for effect in stream:
                if not self._is_current(intent, generation):
                    log.debug("Discarding results of superseded %s", type(intent).__name__)
                    break
                if isinstance(effect, OrchestrationEvent):
                    self._publish(effect)
                else:
                    self.dispatch(effect)
        except Exception as exc:
            log.exception("Handler for %s failed", type(intent).__name__)
            self._publish(IntentFailed(intent, exc))
        finally:
            await stream.aclose()

    def _publish(self, event: OrchestrationEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("Listener failed on %s", type(event).__name__)
