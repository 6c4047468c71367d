"""
Exception hierarchy for zset operations.

Every error raised by the client names the operation that failed and the
arguments it was called with, so a log line or traceback is enough to
reproduce the call.

Taxonomy:
- TransportError: the round trip itself failed (I/O, connection loss, timeout).
- StatusError: the server answered, but with a non-"ok" status. One subclass
  per status kind so callers can branch with ``except NotFoundError``.
- DecodeError: the reply was well-formed but its payload could not be read
  as the expected type.
"""

from typing import Any

from ssdb_zset.core.status import StatusKind


class ProtocolError(Exception):
    """Raised by a transport when a response frame is malformed."""


class ZSetError(Exception):
    """
    Base class for every error surfaced by ZSetClient.

    Attributes:
        operation: Public operation name, e.g. "zscan".
        arguments: Positional arguments the operation was called with.
    """

    def __init__(self, operation: str, arguments: tuple[Any, ...], message: str) -> None:
        self.operation = operation
        self.arguments = arguments
        super().__init__(f"{operation} {_format_arguments(arguments)} error: {message}")


class TransportError(ZSetError):
    """The transport failed to complete the round trip. Never retried."""


class DecodeError(ZSetError):
    """A payload token could not be decoded into the expected type."""


class StatusError(ZSetError):
    """
    The server replied with a non-"ok" status.

    Attributes:
        kind: The classified status of the reply.
    """

    kind: StatusKind = StatusKind.FAIL

    def __init__(
        self,
        operation: str,
        arguments: tuple[Any, ...],
        kind: StatusKind | None = None,
        detail: str | None = None,
    ) -> None:
        if kind is not None:
            self.kind = kind
        self.detail = detail
        message = self.kind.value if not detail else f"{self.kind.value}: {detail}"
        super().__init__(operation, arguments, message)

    @staticmethod
    def for_kind(
        kind: StatusKind,
        operation: str,
        arguments: tuple[Any, ...],
        detail: str | None = None,
    ) -> "StatusError":
        """Build the subclass matching ``kind``."""
        error_class = _STATUS_ERRORS.get(kind, FailError)
        return error_class(operation, arguments, kind, detail)


class NotFoundError(StatusError):
    kind = StatusKind.NOT_FOUND


class FailError(StatusError):
    kind = StatusKind.FAIL


class ClientError(StatusError):
    kind = StatusKind.CLIENT_ERROR


class ServerError(StatusError):
    kind = StatusKind.ERROR


_STATUS_ERRORS: dict[StatusKind, type[StatusError]] = {
    StatusKind.NOT_FOUND: NotFoundError,
    StatusKind.FAIL: FailError,
    StatusKind.CLIENT_ERROR: ClientError,
    StatusKind.ERROR: ServerError,
}


def _format_arguments(arguments: tuple[Any, ...]) -> str:
    return " ".join(repr(arg) for arg in arguments)
