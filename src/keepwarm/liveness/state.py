"""Keepalive configuration and per-session state.

The configuration is immutable once a session is wrapped. The mutable
LivenessState is owned by exactly one LivenessScheduler and never shared
between wrapped sessions.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from keepwarm.config import get_settings


class Strategy(StrEnum):
    """Keepalive heartbeat mechanisms.

    AUTO is only valid as a requested strategy and DISABLED is only ever a
    resolved outcome. The three remaining values are concrete probes.
    """

    AUTO = "auto"
    PROBE_OP = "probe-op"
    RESOURCE_READ = "resource-read"
    CAPABILITY_LIST = "capability-list"
    DISABLED = "disabled"

    @property
    def is_concrete(self) -> bool:
        """Whether this strategy can issue probes."""
        return self not in (Strategy.AUTO, Strategy.DISABLED)


class SchedulerPhase(StrEnum):
    """Phase of a liveness scheduler.

    - IDLE: Never started, or stopped explicitly
    - SCHEDULED: A probe is pending or in flight
    - STOPPED: Disabled after reaching the failure threshold
    """

    IDLE = "idle"
    SCHEDULED = "scheduled"
    STOPPED = "stopped"


class LivenessConfig(BaseModel):
    """Keepalive options supplied at wrap time.

    All durations are in milliseconds.

    Attributes:
        interval: Delay between the end of one probe and the start of the next.
        max_failures: Consecutive failed probes before probing stops.
        debug: Log probe diagnostics.
        strategy: Requested strategy; AUTO selects one after connecting.
        force: Enable keepalive even outside a managed environment.
        connect_delay: Warm-up between a successful connect and the automatic start.
        first_probe_delay: Delay between start and the first probe.
    """

    model_config = ConfigDict(frozen=True)

    interval: int = Field(default=30000, gt=0)
    max_failures: int = Field(default=3, gt=0)
    debug: bool = False
    strategy: Strategy = Strategy.AUTO
    force: bool = False
    connect_delay: int = Field(default=2000, ge=0)
    first_probe_delay: int = Field(default=1000, ge=0)

    @field_validator("strategy")
    @classmethod
    def _reject_disabled(cls, value: Strategy) -> Strategy:
        if value is Strategy.DISABLED:
            raise ValueError("'disabled' is not a requestable strategy")
        return value

    @classmethod
    def from_settings(cls, **overrides: Any) -> "LivenessConfig":
        """Build a config from KEEPWARM_* settings.

        Args:
            **overrides: Field values that take precedence over settings.

        Returns:
            LivenessConfig seeded from the global settings.
        """
        settings = get_settings()
        values: dict[str, Any] = {
            "interval": settings.interval,
            "max_failures": settings.max_failures,
            "debug": settings.debug,
            "connect_delay": settings.connect_delay,
            "first_probe_delay": settings.first_probe_delay,
        }
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class ResolvedStrategy:
    """Strategy chosen for a session, plus any remembered parameters.

    Attributes:
        kind: Resolved strategy (never AUTO).
        operation: Reserved probe operation name that matched, for PROBE_OP.
    """

    kind: Strategy
    operation: str | None = None

    @property
    def is_usable(self) -> bool:
        """Whether probes can be issued with this strategy."""
        return self.kind.is_concrete


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of a single keepalive probe.

    Attributes:
        success: Whether the probe reached the remote service.
        detail: Diagnostic text, only surfaced in debug logs.
    """

    success: bool
    detail: str | None = None

    @classmethod
    def ok(cls, detail: str | None = None) -> "ProbeOutcome":
        """Create a successful outcome."""
        return cls(success=True, detail=detail)

    @classmethod
    def failed(cls, detail: str | None = None) -> "ProbeOutcome":
        """Create a failed outcome."""
        return cls(success=False, detail=detail)


@dataclass
class LivenessState:
    """Mutable state of one liveness scheduler.

    Attributes:
        phase: Current scheduler phase.
        strategy: Resolved strategy, None until determined.
        failure_count: Consecutive failed probes since the last success or start.
        last_success_at: UTC time of the last successful probe.
        timer: Pending probe timer, owned exclusively by the scheduler.
        generation: Incremented by every stop; probe results from an older
            generation are discarded.
    """

    phase: SchedulerPhase = SchedulerPhase.IDLE
    strategy: ResolvedStrategy | None = None
    failure_count: int = 0
    last_success_at: datetime | None = None
    timer: asyncio.TimerHandle | None = None
    generation: int = 0

    @property
    def active(self) -> bool:
        """Whether probing is scheduled."""
        return self.phase is SchedulerPhase.SCHEDULED

    def release_timer(self) -> None:
        """Cancel and drop the pending timer, if any."""
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class LivenessOptions(TypedDict):
    """Configuration echoed in a status snapshot."""

    interval: int
    max_failures: int
    strategy: str


class LivenessStatus(TypedDict, total=False):
    """Snapshot returned by get_status().

    Attributes:
        enabled: Whether keepalive is enabled for this session.
        active: Whether probing is currently scheduled.
        strategy: Resolved strategy value, or None until determined.
        failure_count: Consecutive failed probes.
        last_success_at: ISO-8601 time of the last successful probe.
        phase: Scheduler phase value.
        next_probe_in_ms: Milliseconds until the pending probe fires.
        reason: Why keepalive is disabled (only when enabled is False).
        options: Configured interval, max_failures and requested strategy.
    """

    enabled: bool
    active: bool
    strategy: str | None
    failure_count: int
    last_success_at: str | None
    phase: str
    next_probe_in_ms: int | None
    reason: str
    options: LivenessOptions
