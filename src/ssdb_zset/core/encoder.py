"""
Command encoding.

Turns typed operation inputs into a Command: the wire command name plus an
ordered tuple of text arguments. Validation happens here, before anything
reaches the transport.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from ssdb_zset.core.types import Bound, BoundLike, check_score


@dataclass(frozen=True)
class Command:
    """A fully encoded request: command name and its text arguments."""

    name: str
    args: tuple[str, ...] = ()


def _name(set_name: str) -> str:
    if not isinstance(set_name, str) or not set_name:
        raise ValueError("set name must be a non-empty string")
    return set_name


def validate_name(set_name: str) -> str:
    """Check a set name without encoding a command."""
    return _name(set_name)


def key_list(keys: Iterable[str]) -> list[str]:
    """
    Materialise the keys of a batch command.

    A bare str or bytes is rejected rather than split into characters.
    """
    if isinstance(keys, (str, bytes)):
        raise TypeError("keys must be an iterable of strings, not a single string")
    return list(keys)


def _key(key: str) -> str:
    if not isinstance(key, str) or not key:
        raise ValueError("key must be a non-empty string")
    return key


def _count(value: int, label: str) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{label} must be an int, not {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{label} must be non-negative, got {value}")
    return str(value)


def _rank(value: int, label: str) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{label} must be an int, not {type(value).__name__}")
    return str(value)


# =============================================================================
# Scalar Operations
# =============================================================================


def encode_zset(set_name: str, key: str, score: int) -> Command:
    return Command("zset", (_name(set_name), _key(key), str(check_score(score))))


def encode_key_command(command: str, set_name: str, key: str) -> Command:
    """zget, zdel, zexists, zrank and zrrank all take (name, key)."""
    return Command(command, (_name(set_name), _key(key)))


def encode_zincr(set_name: str, key: str, amount: int) -> Command:
    # amount may be negative
    return Command("zincr", (_name(set_name), _key(key), str(check_score(amount))))


def encode_name_command(command: str, set_name: str) -> Command:
    """zsize and zclear take only the set name."""
    return Command(command, (_name(set_name),))


# =============================================================================
# Interval Operations
# =============================================================================


def encode_interval(command: str, set_name: str, start: BoundLike, end: BoundLike) -> Command:
    """
    zcount, zsum, zavg and zremrangebyscore: inclusive [start, end] score window.

    An unbounded endpoint is sent as an empty token.
    """
    return Command(
        command,
        (_name(set_name), Bound.coerce(start).token(), Bound.coerce(end).token()),
    )


def encode_scan(
    command: str,
    set_name: str,
    key_start: str,
    score_start: BoundLike,
    score_end: BoundLike,
    limit: int,
) -> Command:
    """
    zscan, zrscan and zkeys.

    ``key_start`` may be empty; when set it anchors ties at ``score_start``.
    """
    if not isinstance(key_start, str):
        raise TypeError(f"key_start must be a string, not {type(key_start).__name__}")
    return Command(
        command,
        (
            _name(set_name),
            key_start,
            Bound.coerce(score_start).token(),
            Bound.coerce(score_end).token(),
            _count(limit, "limit"),
        ),
    )


def encode_zlist(name_start: str, name_end: str, limit: int) -> Command:
    """Set names in (name_start, name_end]; empty strings are unbounded."""
    for label, value in (("name_start", name_start), ("name_end", name_end)):
        if not isinstance(value, str):
            raise TypeError(f"{label} must be a string, not {type(value).__name__}")
    return Command("zlist", (name_start, name_end, _count(limit, "limit")))


def encode_rank_interval(command: str, set_name: str, start: int, end: int) -> Command:
    """zremrangebyrank: inclusive [start, end] rank window."""
    return Command(command, (_name(set_name), _rank(start, "start"), _rank(end, "end")))


# =============================================================================
# Offset-Based Operations
# =============================================================================


def encode_window(command: str, set_name: str, offset: int, limit: int) -> Command:
    """
    zrange and zrrange: up to ``limit`` members starting at zero-based ``offset``.

    The server walks ``offset`` members before returning anything, so the
    cost of the call grows with the offset.
    """
    return Command(command, (_name(set_name), _count(offset, "offset"), _count(limit, "limit")))


def encode_pop(command: str, set_name: str, limit: int) -> Command:
    """zpop_front and zpop_back."""
    return Command(command, (_name(set_name), _count(limit, "limit")))


# =============================================================================
# Batch Operations
# =============================================================================


def encode_multi_zset(set_name: str, members: Mapping[str, int]) -> Command:
    """
    Flatten a mapping into interleaved key, score arguments.

    Iteration order of the mapping decides argument order; the server does
    not treat that order as meaningful.
    """
    args = [_name(set_name)]
    for key, score in members.items():
        args.append(_key(key))
        args.append(str(check_score(score)))
    return Command("multi_zset", tuple(args))


def encode_multi_keys(command: str, set_name: str, keys: Iterable[str]) -> Command:
    """multi_zget and multi_zdel: set name followed by every key."""
    return Command(command, (_name(set_name), *(_key(key) for key in key_list(keys))))
