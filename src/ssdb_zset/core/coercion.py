"""
Numeric coercion of payload tokens.

Scores are signed 64-bit integers transmitted as decimal text. A token that
does not parse is either rejected (strict, the default) or read as 0
(lenient, for callers that depend on the historical behaviour).
"""

import math
import re

import structlog

logger = structlog.get_logger()

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")


class InvalidScore(ValueError):
    """Raised when a token is not a valid signed 64-bit decimal integer."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"invalid score token {token!r}")


def parse_score(token: str, *, strict: bool = True) -> int:
    """
    Parse a score token into an int in the signed 64-bit range.

    Args:
        token: Decimal text, optionally signed. No whitespace or underscores.
        strict: Raise InvalidScore on malformed input instead of returning 0.

    Returns:
        The parsed score, or 0 for a malformed token when not strict.

    Example:
        >>> parse_score("-42")
        -42
        >>> parse_score("abc", strict=False)
        0
    """
    if _INTEGER.fullmatch(token):
        value = int(token)
        if INT64_MIN <= value <= INT64_MAX:
            return value

    if strict:
        raise InvalidScore(token)

    logger.warning("score_coercion_fallback", token=token)
    return 0


def parse_average(token: str, *, strict: bool = True) -> float:
    """
    Parse the mean reported by zavg, which may be fractional.

    Follows the same strict/lenient policy as parse_score.
    """
    try:
        value = float(token)
    except ValueError:
        value = math.nan

    if math.isfinite(value):
        return value

    if strict:
        raise InvalidScore(token)

    logger.warning("score_coercion_fallback", token=token)
    return 0.0
