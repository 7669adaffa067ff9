"""KeepaliveSession: a session wrapper that keeps idle connections warm.

The wrapper owns the original session and forwards every operation to it
unchanged. Only connect() is intercepted: after the original handshake
returns, keepalive starts in the background once the warm-up delay has
passed. Keepalive controls live under ``session.keepalive`` so they never
shadow the wrapped session's own attributes.

Example::

    from keepwarm import LivenessConfig, wrap_session

    session = wrap_session(client, "https://server.smithery.ai/mcp/memory")
    await session.connect(transport)
    tools = await session.list_operations()
    print(session.keepalive.get_status())
    session.keepalive.stop()
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from keepwarm.liveness.classifier import Credentials, is_managed_environment
from keepwarm.liveness.scheduler import LivenessScheduler
from keepwarm.liveness.state import LivenessConfig, LivenessStatus
from keepwarm.logging import get_logger
from keepwarm.session import OperationDescriptor, ResourceDescriptor, ServiceSession

LOG = get_logger(__name__)

DISABLED_REASON = "not a managed environment"


class KeepaliveControls(Protocol):
    """Caller-facing keepalive controls."""

    async def start(self) -> None: ...

    def stop(self) -> None: ...

    def get_status(self) -> LivenessStatus: ...


class DisabledKeepalive:
    """Keepalive controls for a session that does not need keepalive."""

    def __init__(self, reason: str = DISABLED_REASON) -> None:
        self.reason = reason

    async def start(self) -> None:
        """Do nothing."""

    def stop(self) -> None:
        """Do nothing."""

    def get_status(self) -> LivenessStatus:
        """Report keepalive as disabled, with the reason."""
        return {"enabled": False, "reason": self.reason}


class KeepaliveSession:
    """Forwarding wrapper around a ServiceSession with background keepalive.

    Args:
        session: The session to wrap. It stays fully usable on its own.
        config: Keepalive configuration.
        enabled: Whether keepalive should run for this session.
    """

    def __init__(
        self,
        session: ServiceSession,
        config: LivenessConfig,
        *,
        enabled: bool = True,
    ) -> None:
        self._session = session
        self._config = config
        self._scheduler: LivenessScheduler | None = (
            LivenessScheduler(session, config) if enabled else None
        )
        self._keepalive: KeepaliveControls = self._scheduler or DisabledKeepalive()
        if self._scheduler is not None:
            # Dropping the wrapper without stop() must not leave probes running
            weakref.finalize(self, self._scheduler.stop)

    @property
    def wrapped(self) -> ServiceSession:
        """The original session."""
        return self._session

    @property
    def keepalive(self) -> KeepaliveControls:
        """Keepalive start/stop/status controls."""
        return self._keepalive

    @property
    def keepalive_config(self) -> LivenessConfig:
        """Keepalive configuration."""
        return self._config

    async def connect(self, transport: Any, *args: Any, **kwargs: Any) -> Any:
        """Connect the wrapped session, then schedule keepalive.

        Returns the original result unmodified and never waits for keepalive.
        """
        result = await self._session.connect(transport, *args, **kwargs)
        if self._scheduler is not None:
            self._scheduler.schedule_start(self._config.connect_delay)
            if self._config.debug:
                LOG.info("keepalive_auto_start_scheduled", delay=self._config.connect_delay)
        return result

    async def list_operations(self) -> Sequence[OperationDescriptor]:
        """Forward to the wrapped session."""
        return await self._session.list_operations()

    async def invoke_operation(self, name: str, arguments: Mapping[str, Any]) -> Any:
        """Forward to the wrapped session."""
        return await self._session.invoke_operation(name, arguments)

    async def list_resources(self) -> Sequence[ResourceDescriptor]:
        """Forward to the wrapped session."""
        return await self._session.list_resources()

    async def read_resource(self, uri: str) -> Any:
        """Forward to the wrapped session."""
        return await self._session.read_resource(uri)

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes not defined on the wrapper
        if name == "_session":
            raise AttributeError(name)
        return getattr(self._session, name)

    async def __aenter__(self) -> KeepaliveSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        # Keepalive never owns the session lifecycle; only probing stops
        self._keepalive.stop()

    def __repr__(self) -> str:
        return f"KeepaliveSession({self._session!r}, enabled={self._scheduler is not None})"


def wrap_session(
    session: ServiceSession,
    endpoint: str,
    credentials: Credentials | None = None,
    config: LivenessConfig | None = None,
) -> KeepaliveSession:
    """Wrap a session with keepalive.

    Never raises because of the classifier outcome; a session outside a
    managed environment (without ``force``) gets no-op keepalive controls.

    Args:
        session: Session to wrap, usually not yet connected.
        endpoint: URL the session connects to.
        credentials: Optional credentials for the endpoint.
        config: Keepalive configuration. Defaults to KEEPWARM_* settings.

    Returns:
        KeepaliveSession forwarding to session.
    """
    config = config if config is not None else LivenessConfig.from_settings()
    enabled = config.force or is_managed_environment(endpoint, credentials)
    if not enabled and config.debug:
        LOG.info("keepalive_disabled", reason=DISABLED_REASON, endpoint=endpoint)
    return KeepaliveSession(session, config, enabled=enabled)


async def connect_with_keepalive(
    session: ServiceSession,
    transport: Any,
    endpoint: str,
    credentials: Credentials | None = None,
    config: LivenessConfig | None = None,
) -> KeepaliveSession:
    """Wrap a session with keepalive and connect it.

    Args:
        session: Session to wrap.
        transport: Transport passed to connect().
        endpoint: URL the session connects to.
        credentials: Optional credentials for the endpoint.
        config: Keepalive configuration.

    Returns:
        Connected KeepaliveSession.
    """
    wrapped = wrap_session(session, endpoint, credentials, config)
    await wrapped.connect(transport)
    return wrapped
