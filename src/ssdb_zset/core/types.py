"""
Value types shared by the encoder, decoder and client.
"""

from dataclasses import dataclass
from typing import NamedTuple, Union

from ssdb_zset.core.coercion import INT64_MAX, INT64_MIN


class Member(NamedTuple):
    """
    One (key, score) pair of a ZSet.

    Being a NamedTuple, a Member compares equal to a plain ``(key, score)`` tuple.
    """

    key: str
    score: int


@dataclass(frozen=True)
class Bound:
    """
    A range endpoint: either unbounded or a concrete score.

    Replaces the old "empty string or number" convention, so an unbounded
    endpoint can no longer be confused with a bound at score 0.

    Attributes:
        value: The score, or None when the bound is open in its direction.

    Example:
        >>> Bound.at(10).token()
        '10'
        >>> UNBOUNDED.token()
        ''
    """

    value: int | None = None

    def __post_init__(self) -> None:
        if self.value is None:
            return
        check_score(self.value)

    @classmethod
    def at(cls, score: int) -> "Bound":
        return cls(score)

    @property
    def is_unbounded(self) -> bool:
        return self.value is None

    def token(self) -> str:
        """Wire form: empty for unbounded, decimal text otherwise."""
        return "" if self.value is None else str(self.value)

    def admits_from_below(self, score: int) -> bool:
        """True if ``score`` is not below this lower bound."""
        return self.value is None or score >= self.value

    def admits_from_above(self, score: int) -> bool:
        """True if ``score`` is not above this upper bound."""
        return self.value is None or score <= self.value

    @classmethod
    def coerce(cls, bound: "BoundLike") -> "Bound":
        """
        Accept the shorthand forms used by the public API.

        None means unbounded, an int means a concrete score. Strings are
        rejected to keep "no bound" and "bound at zero" distinct.
        """
        if isinstance(bound, Bound):
            return bound
        if bound is None:
            return UNBOUNDED
        if isinstance(bound, int) and not isinstance(bound, bool):
            return cls(bound)
        raise TypeError(f"bound must be a Bound, int or None, not {type(bound).__name__}")


UNBOUNDED = Bound()

BoundLike = Union[Bound, int, None]


def check_score(score: int) -> int:
    """Validate that ``score`` is an int within the signed 64-bit range."""
    if isinstance(score, bool) or not isinstance(score, int):
        raise TypeError(f"score must be an int, not {type(score).__name__}")
    if not INT64_MIN <= score <= INT64_MAX:
        raise ValueError(f"score {score} is outside the signed 64-bit range")
    return score
