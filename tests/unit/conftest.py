"""Shared test helpers for unit tests."""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import pytest

from keepwarm.session import OperationDescriptor, ResourceDescriptor


class FakeSession:
    """Scriptable ServiceSession for keepalive tests.

    Args:
        operations: Names of registered operations.
        resources: URIs of listable resources.
        outcomes: Scripted results (True = succeed) consumed by
            invoke_operation and read_resource. Calls beyond the script succeed.
        listing_outcomes: Scripted results consumed by list_operations.
        delay: Seconds every call takes.
    """

    def __init__(
        self,
        operations: Iterable[str] = (),
        resources: Iterable[str] = (),
        outcomes: Iterable[bool] = (),
        listing_outcomes: Iterable[bool] = (),
        delay: float = 0.0,
    ) -> None:
        self.operations = [OperationDescriptor(name) for name in operations]
        self.resources = [ResourceDescriptor(uri) for uri in resources]
        self.outcomes: deque[bool] = deque(outcomes)
        self.listing_outcomes: deque[bool] = deque(listing_outcomes)
        self.delay = delay
        self.dead = False
        self.resources_error: Exception | None = None
        self.calls: list[tuple[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.server_info = {"name": "fake", "version": "1.0"}

    @property
    def probe_calls(self) -> list[tuple[str, Any]]:
        """Calls other than connect."""
        return [call for call in self.calls if call[0] != "connect"]

    async def _enter(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if self.dead:
            raise ConnectionError("session closed")

    def _next_outcome(self, script: deque[bool]) -> None:
        if script and not script.popleft():
            raise ConnectionError("probe failed")

    async def connect(self, transport: Any) -> Any:
        self.calls.append(("connect", transport))
        return {"connected": transport}

    async def list_operations(self) -> list[OperationDescriptor]:
        await self._enter("list_operations")
        self._next_outcome(self.listing_outcomes)
        return list(self.operations)

    async def invoke_operation(self, name: str, arguments: Any) -> Any:
        await self._enter("invoke_operation", name)
        if name not in {op.name for op in self.operations}:
            raise LookupError(f"operation not found: {name}")
        self._next_outcome(self.outcomes)
        return {"ok": True, "arguments": arguments}

    async def list_resources(self) -> list[ResourceDescriptor]:
        await self._enter("list_resources")
        if self.resources_error is not None:
            raise self.resources_error
        return list(self.resources)

    async def read_resource(self, uri: str) -> Any:
        await self._enter("read_resource", uri)
        self._next_outcome(self.outcomes)
        return {"uri": uri, "text": "content"}

    def close(self) -> str:
        return "closed"


@pytest.fixture
def make_session() -> type[FakeSession]:
    """Return the FakeSession class."""
    return FakeSession


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Return a coroutine function that polls until a predicate holds."""

    async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met before timeout")
            await asyncio.sleep(0.005)

    return _wait_until
