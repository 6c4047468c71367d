"""
Typed async client for SSDB sorted sets.

Every public method follows the same path:

    encode -> transport.do -> classify status -> decode payload -> typed result

Each call is exactly one round trip (batch calls with no keys make none).
Nothing is retried, buffered or cached; the client holds no state besides the
injected transport and the score-coercion policy.
"""

from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

import structlog

from ssdb_zset.core import encoder
from ssdb_zset.core.coercion import InvalidScore, parse_average, parse_score
from ssdb_zset.core.decoder import decode_columns, decode_mapping, decode_pairs
from ssdb_zset.core.errors import DecodeError, ProtocolError, StatusError, TransportError
from ssdb_zset.core.status import classify
from ssdb_zset.core.transports.base import Transport
from ssdb_zset.core.types import BoundLike, Member

logger = structlog.get_logger()

T = TypeVar("T")

# Exceptions a transport raises when the round trip itself fails
_TRANSPORT_EXCEPTIONS = (OSError, TimeoutError, EOFError, ProtocolError)


class ZSetClient:
    """
    Operation façade over a Transport.

    Args:
        transport: Performs the round trips. Owned by the caller.
        strict_scores: Raise DecodeError for malformed numeric tokens instead
            of reading them as 0.

    Example:
        >>> client = ZSetClient(InMemoryTransport())
        >>> await client.zset("scores", "alice", 10)
        >>> await client.zget("scores", "alice")
        10
    """

    def __init__(self, transport: Transport, *, strict_scores: bool = True):
        self.transport = transport
        self.strict_scores = strict_scores

    # =========================================================================
    # Round Trip and Decoding
    # =========================================================================

    async def _execute(self, operation: str, arguments: tuple[Any, ...], command: encoder.Command) -> list[str]:
        """Run one command and return the payload of an "ok" reply."""
        logger.debug("zset_command", operation=operation, command=command.name, argc=len(command.args))

        try:
            tokens = await self.transport.do(command.name, *command.args)
        except _TRANSPORT_EXCEPTIONS as exc:
            logger.warning("zset_transport_error", operation=operation, error=repr(exc))
            raise TransportError(operation, arguments, str(exc) or type(exc).__name__) from exc

        reply = classify(tokens)
        if not reply.is_ok:
            logger.info("zset_status_error", operation=operation, status=reply.kind.value, detail=reply.detail)
            raise StatusError.for_kind(reply.kind, operation, arguments, reply.detail)

        return reply.payload

    def _decode(
        self,
        operation: str,
        arguments: tuple[Any, ...],
        decoder: Callable[..., T],
        payload: Sequence[str],
    ) -> T:
        try:
            return decoder(payload, strict=self.strict_scores)
        except InvalidScore as exc:
            raise DecodeError(operation, arguments, str(exc)) from exc

    def _scalar(self, operation: str, arguments: tuple[Any, ...], payload: Sequence[str]) -> int:
        if not payload:
            raise DecodeError(operation, arguments, "reply carries no value")
        return self._decode(operation, arguments, lambda p, strict: parse_score(p[0], strict=strict), payload)

    async def _count(self, operation: str, arguments: tuple[Any, ...], command: encoder.Command) -> int:
        """Commands whose optional payload is a count (0 when absent)."""
        payload = await self._execute(operation, arguments, command)
        if not payload:
            return 0
        return self._scalar(operation, arguments, payload)

    # =========================================================================
    # Scalar Operations
    # =========================================================================

    async def zset(self, set_name: str, key: str, score: int) -> None:
        """Set the score of ``key``, creating the set on first insert."""
        arguments = (set_name, key, score)
        await self._execute("zset", arguments, encoder.encode_zset(set_name, key, score))

    async def zget(self, set_name: str, key: str) -> int:
        """
        Return the score of ``key``.

        Raises:
            NotFoundError: The key is not in the set.
        """
        arguments = (set_name, key)
        payload = await self._execute("zget", arguments, encoder.encode_key_command("zget", set_name, key))
        return self._scalar("zget", arguments, payload)

    async def zdel(self, set_name: str, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error."""
        arguments = (set_name, key)
        await self._execute("zdel", arguments, encoder.encode_key_command("zdel", set_name, key))

    async def zexists(self, set_name: str, key: str) -> bool:
        arguments = (set_name, key)
        payload = await self._execute("zexists", arguments, encoder.encode_key_command("zexists", set_name, key))
        if not payload:
            raise DecodeError("zexists", arguments, "reply carries no value")
        return payload[0] == "1"

    async def zincr(self, set_name: str, key: str, amount: int) -> int:
        """Add ``amount`` (may be negative) to the score of ``key`` and return the new score."""
        arguments = (set_name, key, amount)
        payload = await self._execute("zincr", arguments, encoder.encode_zincr(set_name, key, amount))
        return self._scalar("zincr", arguments, payload)

    async def zsize(self, set_name: str) -> int:
        arguments = (set_name,)
        payload = await self._execute("zsize", arguments, encoder.encode_name_command("zsize", set_name))
        return self._scalar("zsize", arguments, payload)

    async def zclear(self, set_name: str) -> None:
        """Remove every member. Clearing an empty or unknown set succeeds."""
        arguments = (set_name,)
        await self._execute("zclear", arguments, encoder.encode_name_command("zclear", set_name))

    async def zrank(self, set_name: str, key: str) -> int:
        """
        Zero-based position of ``key`` in (score, key) ascending order.

        The server computes this by walking the set, O(set size). Keep it
        off latency-sensitive paths.
        """
        arguments = (set_name, key)
        payload = await self._execute("zrank", arguments, encoder.encode_key_command("zrank", set_name, key))
        return self._scalar("zrank", arguments, payload)

    async def zrrank(self, set_name: str, key: str) -> int:
        """Like zrank, counted from the highest member. Also O(set size)."""
        arguments = (set_name, key)
        payload = await self._execute("zrrank", arguments, encoder.encode_key_command("zrrank", set_name, key))
        return self._scalar("zrrank", arguments, payload)

    # =========================================================================
    # Interval Operations
    # =========================================================================

    async def zcount(self, set_name: str, start: BoundLike = None, end: BoundLike = None) -> int:
        """Number of members with score in [start, end]. None is unbounded."""
        arguments = (set_name, start, end)
        payload = await self._execute("zcount", arguments, encoder.encode_interval("zcount", set_name, start, end))
        return self._scalar("zcount", arguments, payload)

    async def zsum(self, set_name: str, start: BoundLike = None, end: BoundLike = None) -> int:
        """Sum of the scores in [start, end]."""
        arguments = (set_name, start, end)
        payload = await self._execute("zsum", arguments, encoder.encode_interval("zsum", set_name, start, end))
        return self._scalar("zsum", arguments, payload)

    async def zavg(self, set_name: str, start: BoundLike = None, end: BoundLike = None) -> float:
        """Mean of the scores in [start, end]; may be fractional."""
        arguments = (set_name, start, end)
        payload = await self._execute("zavg", arguments, encoder.encode_interval("zavg", set_name, start, end))
        if not payload:
            raise DecodeError("zavg", arguments, "reply carries no value")
        return self._decode("zavg", arguments, lambda p, strict: parse_average(p[0], strict=strict), payload)

    async def zscan(
        self,
        set_name: str,
        key_start: str,
        score_start: BoundLike,
        score_end: BoundLike,
        limit: int,
    ) -> list[Member]:
        """
        Members in ascending (score, key) order, at most ``limit`` of them.

        A member (k, s) is returned when ``s <= score_end`` and either
        ``s > score_start``, or ``s == score_start`` and (``key_start`` is
        empty or ``k > key_start``). Pass the last key and score of a page
        as ``key_start``/``score_start`` to fetch the next page.

        Example:
            >>> await client.zscan("scores", "a", 10, 20, 10)
            [Member(key='b', score=10), Member(key='c', score=20)]
        """
        arguments = (set_name, key_start, score_start, score_end, limit)
        command = encoder.encode_scan("zscan", set_name, key_start, score_start, score_end, limit)
        payload = await self._execute("zscan", arguments, command)
        return self._decode("zscan", arguments, decode_pairs, payload)

    async def zrscan(
        self,
        set_name: str,
        key_start: str,
        score_start: BoundLike,
        score_end: BoundLike,
        limit: int,
    ) -> list[Member]:
        """
        Reverse of zscan: descending order, ``score_start`` is the upper
        bound and ``score_end`` the lower one.
        """
        arguments = (set_name, key_start, score_start, score_end, limit)
        command = encoder.encode_scan("zrscan", set_name, key_start, score_start, score_end, limit)
        payload = await self._execute("zrscan", arguments, command)
        return self._decode("zrscan", arguments, decode_pairs, payload)

    async def zkeys(
        self,
        set_name: str,
        key_start: str,
        score_start: BoundLike,
        score_end: BoundLike,
        limit: int,
    ) -> list[str]:
        """Keys only, with the same selection rules as zscan."""
        arguments = (set_name, key_start, score_start, score_end, limit)
        command = encoder.encode_scan("zkeys", set_name, key_start, score_start, score_end, limit)
        return await self._execute("zkeys", arguments, command)

    async def zlist(self, name_start: str, name_end: str, limit: int) -> list[str]:
        """Names of sets in (name_start, name_end]; empty strings are unbounded."""
        arguments = (name_start, name_end, limit)
        return await self._execute("zlist", arguments, encoder.encode_zlist(name_start, name_end, limit))

    async def zremrangebyrank(self, set_name: str, start: int, end: int) -> int:
        """Remove members ranked in [start, end] and return how many went."""
        arguments = (set_name, start, end)
        command = encoder.encode_rank_interval("zremrangebyrank", set_name, start, end)
        return await self._count("zremrangebyrank", arguments, command)

    async def zremrangebyscore(self, set_name: str, start: BoundLike, end: BoundLike) -> int:
        """Remove members with score in [start, end] and return how many went."""
        arguments = (set_name, start, end)
        command = encoder.encode_interval("zremrangebyscore", set_name, start, end)
        return await self._count("zremrangebyscore", arguments, command)

    # =========================================================================
    # Offset Operations
    #
    # The server walks ``offset`` members before returning any, so these get
    # slower as the offset grows. Prefer zscan for deep pagination.
    # =========================================================================

    async def zrange(self, set_name: str, offset: int, limit: int) -> dict[str, int]:
        """Up to ``limit`` members from position ``offset``, as key -> score."""
        arguments = (set_name, offset, limit)
        payload = await self._execute("zrange", arguments, encoder.encode_window("zrange", set_name, offset, limit))
        return self._decode("zrange", arguments, decode_mapping, payload)

    async def zrange_slice(self, set_name: str, offset: int, limit: int) -> tuple[list[str], list[int]]:
        """zrange as parallel (keys, scores) lists in ascending order."""
        arguments = (set_name, offset, limit)
        payload = await self._execute("zrange", arguments, encoder.encode_window("zrange", set_name, offset, limit))
        return self._decode("zrange", arguments, decode_columns, payload)

    async def zrrange(self, set_name: str, offset: int, limit: int) -> dict[str, int]:
        """Like zrange, counted from the highest member."""
        arguments = (set_name, offset, limit)
        payload = await self._execute("zrrange", arguments, encoder.encode_window("zrrange", set_name, offset, limit))
        return self._decode("zrrange", arguments, decode_mapping, payload)

    async def zrrange_slice(self, set_name: str, offset: int, limit: int) -> tuple[list[str], list[int]]:
        arguments = (set_name, offset, limit)
        payload = await self._execute("zrrange", arguments, encoder.encode_window("zrrange", set_name, offset, limit))
        return self._decode("zrrange", arguments, decode_columns, payload)

    async def zpop_front(self, set_name: str, limit: int) -> dict[str, int]:
        """Remove and return up to ``limit`` of the lowest-ordered members."""
        arguments = (set_name, limit)
        payload = await self._execute("zpop_front", arguments, encoder.encode_pop("zpop_front", set_name, limit))
        return self._decode("zpop_front", arguments, decode_mapping, payload)

    async def zpop_back(self, set_name: str, limit: int) -> dict[str, int]:
        """Remove and return up to ``limit`` of the highest-ordered members."""
        arguments = (set_name, limit)
        payload = await self._execute("zpop_back", arguments, encoder.encode_pop("zpop_back", set_name, limit))
        return self._decode("zpop_back", arguments, decode_mapping, payload)

    # =========================================================================
    # Batch Operations
    #
    # Empty input returns an empty result without a round trip. A batch either
    # succeeds as a whole or raises one error for the whole batch.
    # =========================================================================

    async def multi_zset(self, set_name: str, members: Mapping[str, int]) -> None:
        """Set several scores at once. Argument order follows mapping order."""
        encoder.validate_name(set_name)
        if not members:
            return
        arguments = (set_name, dict(members))
        await self._execute("multi_zset", arguments, encoder.encode_multi_zset(set_name, members))

    async def multi_zget(self, set_name: str, *keys: str) -> dict[str, int]:
        """Scores of the given keys; absent keys are left out."""
        return await self.multi_zget_array(set_name, keys)

    async def multi_zget_array(self, set_name: str, keys: Iterable[str]) -> dict[str, int]:
        encoder.validate_name(set_name)
        keys = encoder.key_list(keys)
        if not keys:
            return {}
        arguments = (set_name, keys)
        payload = await self._execute("multi_zget", arguments, encoder.encode_multi_keys("multi_zget", set_name, keys))
        return self._decode("multi_zget", arguments, decode_mapping, payload)

    async def multi_zget_slice(self, set_name: str, *keys: str) -> tuple[list[str], list[int]]:
        """multi_zget as parallel (keys, scores) lists."""
        return await self.multi_zget_slice_array(set_name, keys)

    async def multi_zget_slice_array(self, set_name: str, keys: Iterable[str]) -> tuple[list[str], list[int]]:
        encoder.validate_name(set_name)
        keys = encoder.key_list(keys)
        if not keys:
            return [], []
        arguments = (set_name, keys)
        payload = await self._execute("multi_zget", arguments, encoder.encode_multi_keys("multi_zget", set_name, keys))
        return self._decode("multi_zget", arguments, decode_columns, payload)

    async def multi_zdel(self, set_name: str, *keys: str) -> None:
        encoder.validate_name(set_name)
        if not keys:
            return
        arguments = (set_name, list(keys))
        await self._execute("multi_zdel", arguments, encoder.encode_multi_keys("multi_zdel", set_name, keys))
