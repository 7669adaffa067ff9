"""Keepalive strategy selection and probe execution.

A dedicated probe operation is the cheapest, side-effect-free heartbeat, so
it is preferred. Reading a resource is next. Re-listing operations is the
fallback, since every live session supports it.
"""

import time
from collections.abc import Mapping
from typing import Any, Final

from keepwarm.exceptions import KeepaliveError, StrategyUnavailableError
from keepwarm.liveness.state import ProbeOutcome, ResolvedStrategy, Strategy
from keepwarm.logging import get_logger
from keepwarm.session import ServiceSession

LOG = get_logger(__name__)

PRIMARY_PROBE_OPERATION: Final[str] = "__smithery_ping"
SECONDARY_PROBE_OPERATION: Final[str] = "__keep_alive"
PROBE_OPERATIONS: Final[tuple[str, str]] = (PRIMARY_PROBE_OPERATION, SECONDARY_PROBE_OPERATION)


def _descriptor_field(descriptor: Any, field: str) -> Any:
    if isinstance(descriptor, Mapping):
        return descriptor.get(field)
    return getattr(descriptor, field, None)


def find_probe_operation(operations: Any) -> str | None:
    """Return the reserved probe operation exposed by a session, if any.

    The primary name wins when both are registered.

    Args:
        operations: Operation descriptors from list_operations().

    Returns:
        Matching reserved name, or None.
    """
    names = {_descriptor_field(op, "name") for op in operations}
    for name in PROBE_OPERATIONS:
        if name in names:
            return name
    return None


async def select_strategy(session: ServiceSession, *, debug: bool = False) -> ResolvedStrategy:
    """Pick the cheapest viable keepalive strategy for a connected session.

    Args:
        session: Connected session to inspect.
        debug: Log selection diagnostics.

    Returns:
        ResolvedStrategy; DISABLED when the session cannot enumerate operations.
    """
    try:
        operations = await session.list_operations()
    except Exception as exc:
        if debug:
            LOG.info("strategy_selection_failed", error=str(exc))
        return ResolvedStrategy(Strategy.DISABLED)

    operation = find_probe_operation(operations)
    if operation is not None:
        return ResolvedStrategy(Strategy.PROBE_OP, operation=operation)

    try:
        resources = await session.list_resources()
    except Exception as exc:
        # Resource listing is optional; fall through to capability listing
        if debug:
            LOG.debug("resource_listing_unavailable", error=str(exc))
    else:
        if resources:
            return ResolvedStrategy(Strategy.RESOURCE_READ)

    return ResolvedStrategy(Strategy.CAPABILITY_LIST)


def _probe_order(operation: str | None) -> list[str]:
    # The name that matched during selection is known to exist, so it goes first
    # even when it is the secondary alias; the other name stays as the retry.
    first = operation if operation in PROBE_OPERATIONS else PRIMARY_PROBE_OPERATION
    return [first] + [name for name in PROBE_OPERATIONS if name != first]


async def _invoke_probe_operation(session: ServiceSession, operation: str | None) -> str:
    last_exc: Exception | None = None
    for name in _probe_order(operation):
        try:
            await session.invoke_operation(name, {"timestamp": int(time.time() * 1000)})
            return name
        except Exception as exc:
            last_exc = exc

    assert last_exc is not None  # for type narrowing
    raise last_exc


async def _read_first_resource(session: ServiceSession) -> str:
    resources = await session.list_resources()
    if not resources:
        raise KeepaliveError("No resources available to read")
    uri = _descriptor_field(resources[0], "uri")
    await session.read_resource(uri)
    return uri


async def execute_probe(
    session: ServiceSession,
    strategy: ResolvedStrategy,
    *,
    debug: bool = False,
) -> ProbeOutcome:
    """Issue one keepalive probe.

    Any exception raised by the session becomes a failed outcome;
    cancellation still propagates.

    Args:
        session: Connected session to probe.
        strategy: Resolved strategy to probe with.
        debug: Log the probe result.

    Returns:
        ProbeOutcome for this probe.
    """
    try:
        if strategy.kind is Strategy.PROBE_OP:
            name = await _invoke_probe_operation(session, strategy.operation)
            detail = f"operation {name}"
        elif strategy.kind is Strategy.RESOURCE_READ:
            uri = await _read_first_resource(session)
            detail = f"resource {uri}"
        elif strategy.kind is Strategy.CAPABILITY_LIST:
            await session.list_operations()
            detail = "operation listing"
        else:
            raise StrategyUnavailableError(strategy.kind.value)
    except Exception as exc:
        if debug:
            LOG.warning("probe_failed", strategy=strategy.kind.value, error=str(exc))
        return ProbeOutcome.failed(f"{type(exc).__name__}: {exc}")

    if debug:
        LOG.info("probe_succeeded", strategy=strategy.kind.value, detail=detail)
    return ProbeOutcome.ok(detail)
