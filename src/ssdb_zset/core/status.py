"""
Status interpretation for SSDB replies.

A reply is an ordered list of text tokens. Token 0 is the status, the rest
is the payload. The status is decoded exactly once, here, into a StatusKind
so nothing downstream compares raw strings.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Sequence


class StatusKind(StrEnum):
    """
    Every status the server can answer with.

    OK: The command succeeded; the payload holds the result.
    NOT_FOUND: The requested key or set does not exist.
    ERROR: The server hit an internal error.
    FAIL: The command failed (also used for unknown or missing statuses).
    CLIENT_ERROR: The request was malformed (bad arguments, unknown command).
    """

    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"
    FAIL = "fail"
    CLIENT_ERROR = "client_error"


@dataclass(frozen=True)
class Reply:
    """
    A classified reply.

    Attributes:
        kind: Decoded status of the reply.
        payload: Tokens 1..N of the reply (empty for failures without detail).
    """

    kind: StatusKind
    payload: list[str] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return self.kind is StatusKind.OK

    @property
    def detail(self) -> str | None:
        """First payload token of a failed reply, which the server uses for a message."""
        if self.is_ok or not self.payload:
            return None
        return self.payload[0]


def classify(tokens: Sequence[str]) -> Reply:
    """
    Classify a raw reply.

    An empty reply or an unrecognised status is never treated as success:
    both classify as FAIL.

    Example:
        >>> classify(["ok", "10"])
        Reply(kind=<StatusKind.OK: 'ok'>, payload=['10'])
        >>> classify(["busy"]).kind
        <StatusKind.FAIL: 'fail'>
    """
    if not tokens:
        return Reply(StatusKind.FAIL)

    try:
        kind = StatusKind(tokens[0])
    except ValueError:
        return Reply(StatusKind.FAIL, [tokens[0]])

    return Reply(kind, list(tokens[1:]))
