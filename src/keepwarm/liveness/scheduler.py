"""Timer-driven keepalive probing for a single session.

The scheduler keeps at most one timer and one probe in flight. The next
probe is armed only after the previous one settles, so slow responses never
pile up. Every stop() bumps a generation counter; a probe that settles under
an older generation is discarded and never counted.
"""

import asyncio
from collections.abc import Coroutine
from datetime import UTC, datetime
from typing import Any

from keepwarm.liveness.state import (
    LivenessConfig,
    LivenessState,
    LivenessStatus,
    ProbeOutcome,
    ResolvedStrategy,
    SchedulerPhase,
    Strategy,
)
from keepwarm.liveness.strategy import execute_probe, select_strategy
from keepwarm.logging import get_logger
from keepwarm.session import ServiceSession

LOG = get_logger(__name__)


class LivenessScheduler:
    """Issue keepalive probes at a fixed cadence and track failures.

    State machine::

        idle --start--> scheduled
        scheduled --success--> scheduled (failures reset)
        scheduled --failure below threshold--> scheduled
        scheduled --failure reaching threshold--> stopped
        any --stop--> idle

    Example:
        >>> scheduler = LivenessScheduler(session, LivenessConfig(interval=10000))
        >>> await scheduler.start()
        >>> scheduler.get_status()["active"]
        True
        >>> scheduler.stop()
    """

    def __init__(self, session: ServiceSession, config: LivenessConfig) -> None:
        """Initialize the scheduler in the idle phase.

        Args:
            session: Session to probe. The scheduler never connects or closes it.
            config: Keepalive configuration.
        """
        self._session = session
        self._config = config
        self._state = LivenessState()
        if config.strategy is not Strategy.AUTO:
            self._state.strategy = ResolvedStrategy(config.strategy)
        self._start_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._probe_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def config(self) -> LivenessConfig:
        """Keepalive configuration."""
        return self._config

    @property
    def active(self) -> bool:
        """Whether probing is scheduled."""
        return self._state.active

    @property
    def phase(self) -> SchedulerPhase:
        """Current scheduler phase."""
        return self._state.phase

    @property
    def strategy(self) -> ResolvedStrategy | None:
        """Resolved strategy, None until determined."""
        return self._state.strategy

    @property
    def failure_count(self) -> int:
        """Consecutive failed probes."""
        return self._state.failure_count

    @property
    def last_success_at(self) -> datetime | None:
        """UTC time of the last successful probe."""
        return self._state.last_success_at

    async def start(self) -> None:
        """Resolve the strategy if needed and arm the first probe.

        Idempotent while scheduled. A concrete strategy, once resolved, is
        never selected again; a DISABLED resolution is retried on the next
        start. Restarting after the failure threshold resets the failure count.
        """
        async with self._start_lock:
            if self._state.active:
                return

            generation = self._state.generation
            strategy = self._state.strategy
            if strategy is None or not strategy.is_usable:
                strategy = await select_strategy(self._session, debug=self._config.debug)
                self._state.strategy = strategy
                if self._config.debug:
                    LOG.info(
                        "keepalive_strategy_selected",
                        strategy=strategy.kind.value,
                        operation=strategy.operation,
                    )

            if not strategy.is_usable:
                if self._config.debug:
                    LOG.info("keepalive_no_strategy")
                return

            if generation != self._state.generation:
                # stop() won while the strategy was being selected
                return

            self._state.phase = SchedulerPhase.SCHEDULED
            self._state.failure_count = 0
            self._arm(self._config.first_probe_delay)
            LOG.debug(
                "keepalive_started",
                strategy=strategy.kind.value,
                interval=self._config.interval,
            )

    def schedule_start(self, delay_ms: int) -> None:
        """Start probing after a warm-up delay, in the background.

        Replaces any pending warm-up. Does nothing while scheduled. Must be
        called from a running event loop.

        Args:
            delay_ms: Warm-up delay in milliseconds.
        """
        if self._state.active:
            return
        loop = asyncio.get_running_loop()
        self._loop = loop
        self._state.release_timer()
        self._state.timer = loop.call_later(
            delay_ms / 1000, self._start_later, self._state.generation
        )

    def stop(self) -> None:
        """Stop probing.

        Synchronous and idempotent. Clears the pending timer; a probe already
        in flight completes but its result is discarded.
        """
        was_active = self._state.active
        self._state.generation += 1
        self._state.release_timer()
        self._state.phase = SchedulerPhase.IDLE
        if was_active:
            LOG.debug("keepalive_stopped", failure_count=self._state.failure_count)

    def get_status(self) -> LivenessStatus:
        """Return a snapshot of the scheduler state."""
        state = self._state
        last_success = state.last_success_at
        return {
            "enabled": True,
            "active": state.active,
            "strategy": state.strategy.kind.value if state.strategy else None,
            "failure_count": state.failure_count,
            "last_success_at": last_success.isoformat() if last_success else None,
            "phase": state.phase.value,
            "next_probe_in_ms": self._next_probe_in_ms(),
            "options": {
                "interval": self._config.interval,
                "max_failures": self._config.max_failures,
                "strategy": self._config.strategy.value,
            },
        }

    async def __aenter__(self) -> "LivenessScheduler":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.stop()

    def _next_probe_in_ms(self) -> int | None:
        timer = self._state.timer
        if timer is None or self._loop is None or not self._state.active:
            return None
        return max(0, int((timer.when() - self._loop.time()) * 1000))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _arm(self, delay_ms: int) -> None:
        loop = asyncio.get_running_loop()
        self._loop = loop
        self._state.release_timer()
        self._state.timer = loop.call_later(delay_ms / 1000, self._fire, self._state.generation)

    def _start_later(self, generation: int) -> None:
        self._state.timer = None
        if generation != self._state.generation:
            return
        self._spawn(self._start_quietly())

    async def _start_quietly(self) -> None:
        try:
            await self.start()
        except Exception as exc:
            if self._config.debug:
                LOG.warning("keepalive_start_failed", error=str(exc))

    def _fire(self, generation: int) -> None:
        self._state.timer = None
        if generation != self._state.generation or not self._state.active:
            return
        self._probe_task = self._spawn(self._probe(generation, self._probe_task))

    async def _probe(self, generation: int, previous: asyncio.Task[None] | None) -> None:
        # A discarded probe from before a stop()/start() may still be running
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        if generation != self._state.generation:
            return

        strategy = self._state.strategy
        assert strategy is not None  # armed only after resolution
        outcome = await execute_probe(self._session, strategy, debug=self._config.debug)
        self._settle(generation, outcome)

    def _settle(self, generation: int, outcome: ProbeOutcome) -> None:
        state = self._state
        if generation != state.generation or not state.active:
            if self._config.debug:
                LOG.debug("probe_result_discarded", success=outcome.success)
            return

        if outcome.success:
            state.failure_count = 0
            state.last_success_at = datetime.now(UTC)
        else:
            state.failure_count += 1
            if self._config.debug:
                LOG.warning(
                    "keepalive_probe_failed",
                    failure_count=state.failure_count,
                    max_failures=self._config.max_failures,
                    detail=outcome.detail,
                )
            if state.failure_count >= self._config.max_failures:
                state.release_timer()
                state.phase = SchedulerPhase.STOPPED
                if self._config.debug:
                    LOG.error("keepalive_disabled", failure_count=state.failure_count)
                return

        self._arm(self._config.interval)
