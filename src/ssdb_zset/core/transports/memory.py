"""
In-memory transport for testing and development.

This transport answers zset commands from Python dictionaries, making it:
- Fast: No network calls, no framing
- Simple: No external dependencies
- Isolated: Each instance is independent

Replies use the same tokens a real SSDB server sends, so the client cannot
tell the difference.

WARNING: Not suitable for production!
- No persistence (data lost on restart)
- No distribution (single process only)

Use SSDBTransport for production deployments.
"""

from typing import Callable

from ssdb_zset.core.coercion import INT64_MAX, INT64_MIN
from ssdb_zset.core.decoder import reverse_scan_admits, scan_admits
from ssdb_zset.core.transports.base import Transport
from ssdb_zset.core.types import Bound, Member

Handler = Callable[[list[str]], list[str]]


class _ArgumentError(ValueError):
    """Raised by a handler when the request cannot be served."""


class InMemoryTransport(Transport):
    """
    In-memory implementation of Transport.

    Stores each ZSet as a key -> score dict and sorts on demand by
    (score, key). A set disappears when its last member is removed.

    Features:
    - All zset commands, including scans, ranks, pops and batch commands
    - Same status tokens as the server (ok, not_found, client_error)
    - Call log for asserting on round trips in tests

    Example:
        >>> transport = InMemoryTransport()
        >>> await transport.do("zset", "scores", "alice", "10")
        ['ok', '1']
        >>> await transport.do("zget", "scores", "alice")
        ['ok', '10']

    Thread Safety:
        Handlers never await, so a single event loop sees each command as
        atomic. Do not share an instance across threads.
    """

    def __init__(self) -> None:
        """Initialize empty storage containers."""
        # Sorted sets: name -> {key: score}
        self._sets: dict[str, dict[str, int]] = {}

        # Every (command, args) pair received, in order
        self.calls: list[tuple[str, tuple[str, ...]]] = []

        self._handlers: dict[str, Handler] = {
            "zset": self._zset,
            "zget": self._zget,
            "zdel": self._zdel,
            "zexists": self._zexists,
            "zincr": self._zincr,
            "zsize": self._zsize,
            "zclear": self._zclear,
            "zcount": self._zcount,
            "zsum": self._zsum,
            "zavg": self._zavg,
            "zscan": self._zscan,
            "zrscan": self._zrscan,
            "zkeys": self._zkeys,
            "zlist": self._zlist,
            "zrank": self._zrank,
            "zrrank": self._zrrank,
            "zrange": self._zrange,
            "zrrange": self._zrrange,
            "zremrangebyrank": self._zremrangebyrank,
            "zremrangebyscore": self._zremrangebyscore,
            "zpop_front": self._zpop_front,
            "zpop_back": self._zpop_back,
            "multi_zset": self._multi_zset,
            "multi_zget": self._multi_zget,
            "multi_zdel": self._multi_zdel,
        }

    async def do(self, command: str, *args: str) -> list[str]:
        """
        Serve one command.

        Unknown commands and bad arguments produce a client_error reply,
        exactly like the server; nothing is raised.
        """
        self.calls.append((command, args))

        handler = self._handlers.get(command)
        if handler is None:
            return ["client_error", f"Unknown Command: {command}"]

        try:
            return handler(list(args))
        except ValueError as exc:
            return ["client_error", str(exc)]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _ordered(self, name: str) -> list[Member]:
        items = self._sets.get(name, {})
        return [Member(key, score) for key, score in sorted(items.items(), key=lambda kv: (kv[1], kv[0]))]

    def _discard_if_empty(self, name: str) -> None:
        if name in self._sets and not self._sets[name]:
            del self._sets[name]

    @staticmethod
    def _arity(args: list[str], count: int, at_least: bool = False) -> None:
        if len(args) < count or (not at_least and len(args) != count):
            raise _ArgumentError("wrong number of arguments")

    @staticmethod
    def _int(token: str) -> int:
        try:
            value = int(token)
        except ValueError:
            raise _ArgumentError(f"invalid integer {token!r}") from None
        if not INT64_MIN <= value <= INT64_MAX:
            raise _ArgumentError(f"integer out of range {token!r}")
        return value

    @classmethod
    def _bound(cls, token: str) -> Bound:
        return Bound() if token == "" else Bound(cls._int(token))

    @staticmethod
    def _pairs(members: list[Member]) -> list[str]:
        tokens = ["ok"]
        for key, score in members:
            tokens.append(key)
            tokens.append(str(score))
        return tokens

    def _in_window(self, name: str, start: Bound, end: Bound) -> list[Member]:
        return [
            m for m in self._ordered(name)
            if start.admits_from_below(m.score) and end.admits_from_above(m.score)
        ]

    # =========================================================================
    # Scalar Commands
    # =========================================================================

    def _zset(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        name, key, score = args[0], args[1], self._int(args[2])
        members = self._sets.setdefault(name, {})
        created = key not in members
        members[key] = score
        return ["ok", "1" if created else "0"]

    def _zget(self, args: list[str]) -> list[str]:
        self._arity(args, 2)
        members = self._sets.get(args[0], {})
        if args[1] not in members:
            return ["not_found"]
        return ["ok", str(members[args[1]])]

    def _zdel(self, args: list[str]) -> list[str]:
        self._arity(args, 2)
        members = self._sets.get(args[0], {})
        removed = members.pop(args[1], None) is not None
        self._discard_if_empty(args[0])
        return ["ok", "1" if removed else "0"]

    def _zexists(self, args: list[str]) -> list[str]:
        self._arity(args, 2)
        return ["ok", "1" if args[1] in self._sets.get(args[0], {}) else "0"]

    def _zincr(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        name, key, amount = args[0], args[1], self._int(args[2])
        members = self._sets.setdefault(name, {})
        members[key] = members.get(key, 0) + amount
        return ["ok", str(members[key])]

    def _zsize(self, args: list[str]) -> list[str]:
        self._arity(args, 1)
        return ["ok", str(len(self._sets.get(args[0], {})))]

    def _zclear(self, args: list[str]) -> list[str]:
        self._arity(args, 1)
        removed = self._sets.pop(args[0], {})
        return ["ok", str(len(removed))]

    def _zrank(self, args: list[str]) -> list[str]:
        self._arity(args, 2)
        return self._rank(args[0], args[1], reverse=False)

    def _zrrank(self, args: list[str]) -> list[str]:
        self._arity(args, 2)
        return self._rank(args[0], args[1], reverse=True)

    def _rank(self, name: str, key: str, reverse: bool) -> list[str]:
        ordered = self._ordered(name)
        if reverse:
            ordered.reverse()
        for position, member in enumerate(ordered):
            if member.key == key:
                return ["ok", str(position)]
        return ["not_found"]

    # =========================================================================
    # Interval Commands
    # =========================================================================

    def _zcount(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        window = self._in_window(args[0], self._bound(args[1]), self._bound(args[2]))
        return ["ok", str(len(window))]

    def _zsum(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        window = self._in_window(args[0], self._bound(args[1]), self._bound(args[2]))
        return ["ok", str(sum(m.score for m in window))]

    def _zavg(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        window = self._in_window(args[0], self._bound(args[1]), self._bound(args[2]))
        if not window:
            return ["ok", "0"]
        return ["ok", repr(sum(m.score for m in window) / len(window))]

    def _scan(self, args: list[str], reverse: bool) -> list[Member]:
        self._arity(args, 5)
        name, key_start = args[0], args[1]
        score_start, score_end = self._bound(args[2]), self._bound(args[3])
        limit = self._int(args[4])

        ordered = self._ordered(name)
        admits = scan_admits
        if reverse:
            ordered.reverse()
            admits = reverse_scan_admits

        found = [m for m in ordered if admits(m, key_start, score_start, score_end)]
        return found[:max(limit, 0)]

    def _zscan(self, args: list[str]) -> list[str]:
        return self._pairs(self._scan(args, reverse=False))

    def _zrscan(self, args: list[str]) -> list[str]:
        return self._pairs(self._scan(args, reverse=True))

    def _zkeys(self, args: list[str]) -> list[str]:
        return ["ok"] + [m.key for m in self._scan(args, reverse=False)]

    def _zlist(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        name_start, name_end, limit = args[0], args[1], self._int(args[2])
        names = [
            name for name in sorted(self._sets)
            if (not name_start or name > name_start) and (not name_end or name <= name_end)
        ]
        return ["ok"] + names[:max(limit, 0)]

    def _zremrangebyscore(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        name = args[0]
        window = self._in_window(name, self._bound(args[1]), self._bound(args[2]))
        members = self._sets.get(name, {})
        for key, _ in window:
            del members[key]
        self._discard_if_empty(name)
        return ["ok", str(len(window))]

    def _zremrangebyrank(self, args: list[str]) -> list[str]:
        self._arity(args, 3)
        name, start, end = args[0], self._int(args[1]), self._int(args[2])
        ordered = self._ordered(name)
        # Ranks are inclusive on both ends
        doomed = ordered[max(start, 0):end + 1] if end >= 0 else []
        members = self._sets.get(name, {})
        for key, _ in doomed:
            del members[key]
        self._discard_if_empty(name)
        return ["ok", str(len(doomed))]

    # =========================================================================
    # Offset and Pop Commands
    # =========================================================================

    def _window(self, args: list[str], reverse: bool) -> list[Member]:
        self._arity(args, 3)
        name, offset, limit = args[0], self._int(args[1]), self._int(args[2])
        ordered = self._ordered(name)
        if reverse:
            ordered.reverse()
        return ordered[max(offset, 0):max(offset, 0) + max(limit, 0)]

    def _zrange(self, args: list[str]) -> list[str]:
        return self._pairs(self._window(args, reverse=False))

    def _zrrange(self, args: list[str]) -> list[str]:
        return self._pairs(self._window(args, reverse=True))

    def _pop(self, args: list[str], reverse: bool) -> list[str]:
        self._arity(args, 2)
        name, limit = args[0], self._int(args[1])
        ordered = self._ordered(name)
        if reverse:
            ordered.reverse()
        popped = ordered[:max(limit, 0)]
        members = self._sets.get(name, {})
        for key, _ in popped:
            del members[key]
        self._discard_if_empty(name)
        return self._pairs(popped)

    def _zpop_front(self, args: list[str]) -> list[str]:
        return self._pop(args, reverse=False)

    def _zpop_back(self, args: list[str]) -> list[str]:
        return self._pop(args, reverse=True)

    # =========================================================================
    # Batch Commands
    # =========================================================================

    def _multi_zset(self, args: list[str]) -> list[str]:
        self._arity(args, 1, at_least=True)
        name, flat = args[0], args[1:]
        if len(flat) % 2:
            raise _ArgumentError("wrong number of arguments")
        pairs = [(flat[i], self._int(flat[i + 1])) for i in range(0, len(flat), 2)]
        members = self._sets.setdefault(name, {})
        created = 0
        for key, score in pairs:
            created += key not in members
            members[key] = score
        self._discard_if_empty(name)
        return ["ok", str(created)]

    def _multi_zget(self, args: list[str]) -> list[str]:
        self._arity(args, 1, at_least=True)
        members = self._sets.get(args[0], {})
        found = [Member(key, members[key]) for key in args[1:] if key in members]
        return self._pairs(found)

    def _multi_zdel(self, args: list[str]) -> list[str]:
        self._arity(args, 1, at_least=True)
        name = args[0]
        members = self._sets.get(name, {})
        removed = sum(members.pop(key, None) is not None for key in args[1:])
        self._discard_if_empty(name)
        return ["ok", str(removed)]

    # =========================================================================
    # Utility Methods (not part of interface, useful for testing)
    # =========================================================================

    def clear(self) -> None:
        """
        Clear all stored data and the call log.

        Useful for resetting state between tests.
        """
        self._sets.clear()
        self.calls.clear()

    def names(self) -> list[str]:
        """Names of all non-empty sets, sorted."""
        return sorted(self._sets)
