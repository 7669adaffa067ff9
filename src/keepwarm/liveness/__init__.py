"""Keepalive probing for long-lived service sessions.

This package provides:
- is_managed_environment for deciding whether a target needs keepalive
- select_strategy / execute_probe for choosing and issuing probes
- LivenessScheduler for the timer-driven probe loop
- LivenessConfig and state types shared by all of the above
"""

from keepwarm.liveness.classifier import (
    MANAGED_DOMAINS,
    Credentials,
    is_managed_environment,
)
from keepwarm.liveness.scheduler import LivenessScheduler
from keepwarm.liveness.state import (
    LivenessConfig,
    LivenessState,
    LivenessStatus,
    ProbeOutcome,
    ResolvedStrategy,
    SchedulerPhase,
    Strategy,
)
from keepwarm.liveness.strategy import (
    PRIMARY_PROBE_OPERATION,
    SECONDARY_PROBE_OPERATION,
    execute_probe,
    select_strategy,
)

__all__ = [
    # Classification
    "MANAGED_DOMAINS",
    "Credentials",
    "is_managed_environment",
    # Strategy
    "PRIMARY_PROBE_OPERATION",
    "SECONDARY_PROBE_OPERATION",
    "select_strategy",
    "execute_probe",
    # Scheduling
    "LivenessScheduler",
    # State management
    "LivenessConfig",
    "LivenessState",
    "LivenessStatus",
    "ProbeOutcome",
    "ResolvedStrategy",
    "SchedulerPhase",
    "Strategy",
]
