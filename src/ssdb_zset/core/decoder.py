"""
Pair decoding and range-boundary semantics.

Most zset replies carry a flat payload of alternating key and score tokens:

    ["a", "10", "b", "10", "c", "20"]

The decoders here walk that payload two tokens at a time. A trailing
unpaired token (never sent by a well-formed server) is ignored.

The boundary predicates at the bottom define which members a scan returns.
The server is the authority on them; they are kept here so the in-memory
transport and the tests share one definition.
"""

from typing import Iterator, Sequence

from ssdb_zset.core.coercion import parse_score
from ssdb_zset.core.types import Bound, Member


# =============================================================================
# Payload Decoders
# =============================================================================


def iter_pairs(payload: Sequence[str], *, strict: bool = True) -> Iterator[Member]:
    """
    Yield a Member for each complete (key, score) pair of the payload.

    Each key is paired with the token that immediately follows it.

    Raises:
        InvalidScore: A score token is malformed and ``strict`` is set.
    """
    for index in range(0, len(payload) - 1, 2):
        yield Member(payload[index], parse_score(payload[index + 1], strict=strict))


def decode_pairs(payload: Sequence[str], *, strict: bool = True) -> list[Member]:
    """
    Decode an ordered payload, preserving server order.

    Used by forward/reverse scans where order is part of the contract.

    Example:
        >>> decode_pairs(["b", "10", "c", "20"])
        [Member(key='b', score=10), Member(key='c', score=20)]
    """
    return list(iter_pairs(payload, strict=strict))


def decode_mapping(payload: Sequence[str], *, strict: bool = True) -> dict[str, int]:
    """
    Decode a payload into a key -> score mapping.

    The dict keeps server order as a courtesy, but operations returning a
    mapping do not promise any order. A repeated key keeps its last score.
    """
    return {member.key: member.score for member in iter_pairs(payload, strict=strict)}


def decode_columns(
    payload: Sequence[str], *, strict: bool = True
) -> tuple[list[str], list[int]]:
    """
    Decode a payload into parallel key and score lists of equal length.

    Example:
        >>> decode_columns(["a", "1", "b", "2"])
        (['a', 'b'], [1, 2])
    """
    keys: list[str] = []
    scores: list[int] = []
    for member in iter_pairs(payload, strict=strict):
        keys.append(member.key)
        scores.append(member.score)
    return keys, scores


# =============================================================================
# Range Boundary Rules
# =============================================================================


def scan_admits(
    member: Member,
    key_start: str,
    score_start: Bound,
    score_end: Bound,
) -> bool:
    """
    Forward-scan boundary rule (zscan, zkeys).

    Score bounds are checked first. Then, only when ``key_start`` is given
    and the lower bound is concrete, a member tied at ``score_start`` must
    sort strictly after ``key_start``. With an empty ``key_start`` the lower
    bound is inclusive.

    Example:
        >>> scan_admits(Member("a", 10), "a", Bound.at(10), Bound.at(20))
        False
        >>> scan_admits(Member("b", 10), "a", Bound.at(10), Bound.at(20))
        True
    """
    key, score = member
    if not (score_start.admits_from_below(score) and score_end.admits_from_above(score)):
        return False
    if key_start and score_start.value is not None and score == score_start.value:
        return key > key_start
    return True


def reverse_scan_admits(
    member: Member,
    key_start: str,
    score_start: Bound,
    score_end: Bound,
) -> bool:
    """
    Reverse-scan boundary rule (zrscan).

    Mirror image of scan_admits: the walk runs from high to low, so
    ``score_start`` is the upper bound and ``score_end`` the lower one, and
    a member tied at ``score_start`` must sort strictly before ``key_start``.
    """
    key, score = member
    if not (score_start.admits_from_above(score) and score_end.admits_from_below(score)):
        return False
    if key_start and score_start.value is not None and score == score_start.value:
        return key < key_start
    return True
