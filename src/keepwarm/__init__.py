"""keepwarm - keep long-lived service sessions warm.

Remote platforms that drop idle connections break long-lived client
sessions. keepwarm wraps an existing session and probes it in the
background with the cheapest heartbeat the remote supports, disabling
itself after repeated failures. The wrapped session behaves exactly like
the original for every other operation.

This package provides:
- Environment classification (is keepalive needed for this endpoint?)
- Adaptive probe strategy selection
- A self-disabling liveness scheduler
- A forwarding session wrapper with start/stop/status controls

Example:
    >>> from keepwarm import LivenessConfig, wrap_session
    >>> session = wrap_session(client, "https://server.smithery.ai/mcp/memory")
    >>> await session.connect(transport)
    >>> session.keepalive.get_status()["enabled"]
    True
"""

from keepwarm.config import KeepwarmSettings, get_settings
from keepwarm.exceptions import KeepaliveError, KeepwarmError, StrategyUnavailableError
from keepwarm.liveness import (
    Credentials,
    LivenessConfig,
    LivenessScheduler,
    LivenessStatus,
    ProbeOutcome,
    ResolvedStrategy,
    SchedulerPhase,
    Strategy,
    is_managed_environment,
)
from keepwarm.session import OperationDescriptor, ResourceDescriptor, ServiceSession
from keepwarm.wrapper import (
    DisabledKeepalive,
    KeepaliveSession,
    connect_with_keepalive,
    wrap_session,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Session wrapper
    "KeepaliveSession",
    "DisabledKeepalive",
    "wrap_session",
    "connect_with_keepalive",
    # Session protocol
    "ServiceSession",
    "OperationDescriptor",
    "ResourceDescriptor",
    # Keepalive
    "Credentials",
    "LivenessConfig",
    "LivenessScheduler",
    "LivenessStatus",
    "ProbeOutcome",
    "ResolvedStrategy",
    "SchedulerPhase",
    "Strategy",
    "is_managed_environment",
    # Configuration
    "KeepwarmSettings",
    "get_settings",
    # Exceptions
    "KeepwarmError",
    "KeepaliveError",
    "StrategyUnavailableError",
]
