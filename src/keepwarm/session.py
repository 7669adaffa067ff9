"""Session protocol consumed from the transport layer.

keepwarm never implements a transport. It works with any object that
provides the operations below; a connected MCP-style client is the typical
implementation. Each operation raises an exception when the connection is
dead, which is all the keepalive machinery needs to know.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class OperationDescriptor:
    """An operation registered on the remote service.

    Attributes:
        name: Operation name used with invoke_operation().
        input_schema: JSON schema describing the operation arguments.
    """

    name: str
    input_schema: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceDescriptor:
    """A listable resource exposed by the remote service.

    Attributes:
        uri: Identifier passed to read_resource().
        name: Optional display name.
    """

    uri: str
    name: str | None = None


@runtime_checkable
class ServiceSession(Protocol):
    """Protocol for a request/response session with resource listing.

    Example:
        >>> class MySession:
        ...     async def connect(self, transport):
        ...         return await transport.open()
        ...
        ...     async def list_operations(self):
        ...         return [OperationDescriptor("search")]
        ...
        ...     async def invoke_operation(self, name, arguments):
        ...         return await self._call(name, arguments)
        ...
        ...     async def list_resources(self):
        ...         return []
        ...
        ...     async def read_resource(self, uri):
        ...         return await self._read(uri)
    """

    async def connect(self, transport: Any) -> Any:
        """Establish the session over the given transport.

        Args:
            transport: Transport object understood by the implementation.

        Returns:
            Whatever the implementation returns for a successful handshake.
        """
        ...

    async def list_operations(self) -> Sequence[OperationDescriptor]:
        """Enumerate the operations registered on the remote service."""
        ...

    async def invoke_operation(self, name: str, arguments: Mapping[str, Any]) -> Any:
        """Invoke a remote operation by name.

        Args:
            name: Operation name.
            arguments: Operation arguments.

        Returns:
            The operation result.
        """
        ...

    async def list_resources(self) -> Sequence[ResourceDescriptor]:
        """Enumerate listable resources, in server order."""
        ...

    async def read_resource(self, uri: str) -> Any:
        """Read a resource's content.

        Args:
            uri: Resource identifier from list_resources().

        Returns:
            The resource content.
        """
        ...
