from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated, Final

from typing_extensions import Doc

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS: Final[float] = 2.0
DEFAULT_SETTLE_SECONDS: Final[float] = 0.1


class ProgressCounter:
    """
    Monotonic count of generated sequence indices shared by every worker of a run.

    All workers run on one event loop and add() never awaits, so increments cannot interleave.
    """

    def __init__(self) -> None:
        self._value = 0

    def add(self, n: int) -> int:
        if n < 0:
            raise ValueError('progress can only move forward.')
        self._value += n
        return self._value

    @property
    def value(self) -> int:
        return self._value


@dataclass(frozen=True)
class ProgressSnapshot:
    current: int
    target: int
    elapsed: float
    rate: float
    percent: float
    eta: float | None

    def format(self) -> str:
        eta = str(timedelta(seconds=int(self.eta))) if self.eta is not None else '?'
        return (
            f'Progress: {self.current}/{self.target} ({self.percent:.1f}%) | '
            f'Rate: {self.rate:.0f}/sec | ETA: {eta}'
        )


def take_snapshot(current: int, target: int, elapsed: float) -> ProgressSnapshot:
    rate = current / elapsed if elapsed > 0 else 0.0
    percent = current / target * 100 if target > 0 else 100.0
    eta = max(target - current, 0) / rate if rate > 0 else None
    return ProgressSnapshot(current=current, target=target, elapsed=elapsed, rate=rate, percent=percent, eta=eta)


class ProgressReporter:
    """
    Background task that logs one status line per `interval` until stop() is called.

    stop() waits `settle` seconds after the task exits so in-flight increments land
    before the caller reads the final count straight from the counter.
    """

    def __init__(
        self,
        counter: ProgressCounter,
        target: int,
        *,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        settle: float = DEFAULT_SETTLE_SECONDS,
        emit: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval <= 0:
            raise ValueError('interval must be > 0.')
        self.counter = counter
        self.target = target
        self.interval = interval
        self.settle = settle
        self._emit = emit or logger.info
        self._clock = clock
        self._done = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._started_at: float | None = None
        self.ticks = 0

    @property
    def elapsed(self) -> Annotated[float, Doc('Seconds since start(), or 0.0 before it.')]:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError('ProgressReporter already started.')
        self._started_at = self._clock()
        self._task = asyncio.create_task(self._run())

    def tick(self) -> ProgressSnapshot:
        snap = take_snapshot(self.counter.value, self.target, self.elapsed)
        self.ticks += 1
        self._emit(snap.format())
        return snap

    async def _run(self) -> None:
        while not self._done.is_set():
            try:
                await asyncio.wait_for(self._done.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                self.tick()

    async def stop(self) -> None:
        self._done.set()
        if self._task is not None:
            await self._task
        if self.settle > 0:
            await asyncio.sleep(self.settle)

    async def __aenter__(self) -> ProgressReporter:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
