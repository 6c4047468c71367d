"""SSDB block protocol framing over asyncio streams.

Each token is sent as its byte length in decimal, a newline, the bytes and
another newline. A blank line ends the message:

    4\\nzget\\n6\\nscores\\n5\\nalice\\n\\n

Responses use the same framing.
"""

import asyncio
from typing import Any

from ssdb_zset.core.errors import ProtocolError

ENCODING = "utf-8"

# Largest single token we are willing to buffer.
MAX_TOKEN_SIZE = 512 * 1024 * 1024


def to_token(value: Any) -> bytes:
    """Encode one argument as bytes. bool is rejected to avoid sending "True"."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a valid wire argument")
    if isinstance(value, (str, int)):
        return str(value).encode(ENCODING)
    raise TypeError(f"cannot encode {type(value).__name__} as a wire argument")


def encode_request(command: str, *args: Any) -> bytes:
    """Encode a command and its arguments as a single framed message."""
    parts = []
    for value in (command, *args):
        data = to_token(value)
        parts.append(b"%d\n%s\n" % (len(data), data))
    parts.append(b"\n")
    return b"".join(parts)


async def read_response(reader: asyncio.StreamReader) -> list[str]:
    """Read one framed response and return its tokens as text."""
    tokens: list[str] = []
    while True:
        try:
            line = await reader.readuntil(b"\n")
        except asyncio.LimitOverrunError:
            raise ProtocolError("block header too long") from None
        header = line.rstrip(b"\r\n")
        if not header:
            if not tokens:
                # Empty lines between messages carry nothing.
                continue
            return tokens

        try:
            size = int(header)
        except ValueError:
            raise ProtocolError(f"invalid block header {header!r}") from None
        if size < 0 or size > MAX_TOKEN_SIZE:
            raise ProtocolError(f"block size {size} out of range")

        data = await reader.readexactly(size)
        terminator = await reader.readexactly(1)
        if terminator == b"\r":
            terminator = await reader.readexactly(1)
        if terminator != b"\n":
            raise ProtocolError("block not terminated by newline")

        tokens.append(data.decode(ENCODING, errors="replace"))
