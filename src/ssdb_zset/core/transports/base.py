"""
Abstract base class for transports.

A transport owns everything about reaching the server: the connection,
authentication, framing and timeouts. The client only ever asks it for one
thing, a single request/response round trip.

Separating the transport from the client allows:
- Testing the client with InMemoryTransport or a mock (no server needed)
- Swapping the TCP implementation without touching encoding or decoding
"""

from abc import ABC, abstractmethod


class Transport(ABC):
    """
    Abstract base class for an SSDB round trip.

    Implementations must:
    - Send one command and return the full reply as text tokens
    - Raise OSError, TimeoutError, EOFError or ProtocolError on failure,
      never return a partial reply
    - Serialise concurrent callers if the underlying connection is shared

    Available implementations:
    - InMemoryTransport: For testing and development (no persistence)
    - SSDBTransport: For production (TCP, SSDB wire protocol)

    Example:
        >>> transport = InMemoryTransport()
        >>> await transport.do("zset", "scores", "alice", "10")
        ['ok', '1']
    """

    @abstractmethod
    async def do(self, command: str, *args: str) -> list[str]:
        """
        Perform one round trip.

        Args:
            command: Wire command name, e.g. "zscan".
            *args: Command arguments, already encoded as text.

        Returns:
            The reply tokens. Token 0 is the status, the rest is the payload.
            A non-"ok" status is returned, not raised.
        """
        pass

    async def close(self) -> None:
        """
        Release any resources held by the transport.

        Safe to call more than once.
        """
        return None
