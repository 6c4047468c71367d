import asyncio

import pytest

from ssdb_zset.core.errors import ProtocolError
from ssdb_zset.core.wire import encode_request, read_response, to_token


def _reader(data: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


def test_encode_request_frames_every_token():
    assert encode_request("zget", "scores", "alice") == b"4\nzget\n6\nscores\n5\nalice\n\n"


def test_encode_request_keeps_empty_tokens():
    assert encode_request("zscan", "s", "", "") == b"5\nzscan\n1\ns\n0\n\n0\n\n\n"


def test_length_is_in_bytes():
    assert encode_request("zget", "é") == b"4\nzget\n2\n\xc3\xa9\n\n"


@pytest.mark.parametrize("value, expected", [("a", b"a"), (10, b"10"), (-1, b"-1"), (b"\x00", b"\x00")])
def test_to_token(value, expected):
    assert to_token(value) == expected


@pytest.mark.parametrize("value", [True, 1.5, None])
def test_to_token_rejects_other_types(value):
    with pytest.raises(TypeError):
        to_token(value)


@pytest.mark.asyncio
async def test_read_response():
    reader = _reader(b"2\nok\n1\na\n2\n10\n\n")

    assert await read_response(reader) == ["ok", "a", "10"]


@pytest.mark.asyncio
async def test_read_response_with_empty_token():
    reader = _reader(b"2\nok\n0\n\n\n")

    assert await read_response(reader) == ["ok", ""]


@pytest.mark.asyncio
async def test_read_response_accepts_crlf():
    reader = _reader(b"2\r\nok\r\n1\r\n5\r\n\r\n")

    assert await read_response(reader) == ["ok", "5"]


@pytest.mark.asyncio
async def test_read_consecutive_responses():
    reader = _reader(b"2\nok\n\n9\nnot_found\n\n")

    assert await read_response(reader) == ["ok"]
    assert await read_response(reader) == ["not_found"]


@pytest.mark.asyncio
async def test_bad_header_is_protocol_error():
    with pytest.raises(ProtocolError):
        await read_response(_reader(b"xx\nok\n\n"))


@pytest.mark.asyncio
async def test_missing_terminator_is_protocol_error():
    with pytest.raises(ProtocolError):
        await read_response(_reader(b"2\nokX\n"))


@pytest.mark.asyncio
async def test_truncated_response_is_eof():
    with pytest.raises(EOFError):
        await read_response(_reader(b"5\nok"))
