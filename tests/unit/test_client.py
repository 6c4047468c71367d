import pytest
from unittest.mock import AsyncMock

from ssdb_zset.client import ZSetClient
from ssdb_zset.core.errors import (
    ClientError,
    DecodeError,
    FailError,
    NotFoundError,
    ProtocolError,
    ServerError,
    StatusError,
    TransportError,
)
from ssdb_zset.core.status import StatusKind
from ssdb_zset.core.transports.base import Transport
from ssdb_zset.core.types import Bound

@pytest.fixture
def mock_transport():
    transport = AsyncMock(spec=Transport)
    # Default: bare success
    transport.do.return_value = ["ok"]
    return transport

@pytest.fixture
def client(mock_transport):
    return ZSetClient(mock_transport)

@pytest.mark.asyncio
async def test_zget_sends_command_and_decodes_score(client, mock_transport):
    mock_transport.do.return_value = ["ok", "42"]

    score = await client.zget("scores", "alice")

    assert score == 42
    mock_transport.do.assert_awaited_once_with("zget", "scores", "alice")

@pytest.mark.asyncio
async def test_zscan_encodes_bounds(client, mock_transport):
    mock_transport.do.return_value = ["ok", "b", "10", "c", "20"]

    members = await client.zscan("scores", "a", 10, Bound.at(20), 10)

    assert members == [("b", 10), ("c", 20)]
    mock_transport.do.assert_awaited_once_with("zscan", "scores", "a", "10", "20", "10")

@pytest.mark.asyncio
async def test_zrscan_pairs_each_key_with_its_score(client, mock_transport):
    mock_transport.do.return_value = ["ok", "c", "20", "b", "10", "a", "5"]

    members = await client.zrscan("scores", "", None, None, 10)

    assert members == [("c", 20), ("b", 10), ("a", 5)]
    mock_transport.do.assert_awaited_once_with("zrscan", "scores", "", "", "", "10")

@pytest.mark.asyncio
async def test_zexists(client, mock_transport):
    mock_transport.do.return_value = ["ok", "1"]
    assert await client.zexists("scores", "alice") is True

    mock_transport.do.return_value = ["ok", "0"]
    assert await client.zexists("scores", "alice") is False

@pytest.mark.asyncio
async def test_zavg_may_be_fractional(client, mock_transport):
    mock_transport.do.return_value = ["ok", "12.5"]

    assert await client.zavg("scores") == 12.5
    mock_transport.do.assert_awaited_once_with("zavg", "scores", "", "")

@pytest.mark.asyncio
async def test_zrange_slice_returns_parallel_lists(client, mock_transport):
    mock_transport.do.return_value = ["ok", "a", "1", "b", "2"]

    keys, scores = await client.zrange_slice("scores", 0, 2)

    assert keys == ["a", "b"]
    assert scores == [1, 2]

@pytest.mark.asyncio
async def test_zremrangebyscore_without_count_returns_zero(client, mock_transport):
    mock_transport.do.return_value = ["ok"]

    assert await client.zremrangebyscore("scores", None, 10) == 0
    mock_transport.do.assert_awaited_once_with("zremrangebyscore", "scores", "", "10")

# =============================================================================
# Status classification
# =============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error_class",
    [
        ("not_found", NotFoundError),
        ("fail", FailError),
        ("client_error", ClientError),
        ("error", ServerError),
        ("something_new", FailError),
    ],
)
async def test_non_ok_status_raises_classified_error(client, mock_transport, status, error_class):
    mock_transport.do.return_value = [status]

    with pytest.raises(error_class) as exc_info:
        await client.zget("scores", "alice")

    assert exc_info.value.operation == "zget"
    assert exc_info.value.arguments == ("scores", "alice")

@pytest.mark.asyncio
async def test_empty_reply_is_fail(client, mock_transport):
    mock_transport.do.return_value = []

    with pytest.raises(StatusError) as exc_info:
        await client.zset("scores", "alice", 1)

    assert exc_info.value.kind == StatusKind.FAIL

# =============================================================================
# Transport failures
# =============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [ConnectionResetError("reset"), TimeoutError(), EOFError(), ProtocolError("bad frame")],
)
async def test_transport_failure_is_wrapped_and_not_retried(client, mock_transport, failure):
    mock_transport.do.side_effect = failure

    with pytest.raises(TransportError) as exc_info:
        await client.zsize("scores")

    assert exc_info.value.operation == "zsize"
    assert exc_info.value.arguments == ("scores",)
    assert exc_info.value.__cause__ is failure
    assert mock_transport.do.await_count == 1

# =============================================================================
# Decoding
# =============================================================================

@pytest.mark.asyncio
async def test_malformed_score_raises_decode_error(client, mock_transport):
    mock_transport.do.return_value = ["ok", "a", "ten"]

    with pytest.raises(DecodeError) as exc_info:
        await client.zscan("scores", "", None, None, 10)

    assert exc_info.value.operation == "zscan"

@pytest.mark.asyncio
async def test_lenient_client_zeroes_malformed_score(mock_transport):
    client = ZSetClient(mock_transport, strict_scores=False)
    mock_transport.do.return_value = ["ok", "a", "ten", "b", "2"]

    assert await client.zrange("scores", 0, 10) == {"a": 0, "b": 2}

@pytest.mark.asyncio
async def test_missing_scalar_payload_raises_decode_error(client, mock_transport):
    mock_transport.do.return_value = ["ok"]

    with pytest.raises(DecodeError):
        await client.zsize("scores")

# =============================================================================
# Batch short-circuit
# =============================================================================

@pytest.mark.asyncio
async def test_empty_batches_never_reach_transport(client, mock_transport):
    assert await client.multi_zget("scores") == {}
    assert await client.multi_zget_array("scores", []) == {}
    assert await client.multi_zget_slice("scores") == ([], [])
    assert await client.multi_zget_slice_array("scores", []) == ([], [])
    assert await client.multi_zdel("scores") is None
    assert await client.multi_zset("scores", {}) is None

    mock_transport.do.assert_not_awaited()

@pytest.mark.asyncio
async def test_multi_zdel_sends_set_name(client, mock_transport):
    await client.multi_zdel("scores", "a", "b")

    mock_transport.do.assert_awaited_once_with("multi_zdel", "scores", "a", "b")

@pytest.mark.asyncio
async def test_multi_zget_slice_has_no_padding(client, mock_transport):
    mock_transport.do.return_value = ["ok", "a", "1", "b", "2"]

    assert await client.multi_zget_slice("scores", "a", "b", "missing") == (["a", "b"], [1, 2])

@pytest.mark.asyncio
async def test_invalid_arguments_fail_before_transport(client, mock_transport):
    with pytest.raises(ValueError):
        await client.zincr("scores", "", 1)
    with pytest.raises(ValueError):
        await client.zrange("scores", -1, 10)

    mock_transport.do.assert_not_awaited()

@pytest.mark.asyncio
async def test_batch_keys_given_as_bare_string_are_rejected(client, mock_transport):
    with pytest.raises(TypeError):
        await client.multi_zget_array("scores", "ab")
    with pytest.raises(TypeError):
        await client.multi_zget_slice_array("scores", "ab")

    mock_transport.do.assert_not_awaited()

@pytest.mark.asyncio
async def test_empty_batch_still_checks_set_name(client, mock_transport):
    with pytest.raises(ValueError):
        await client.multi_zset("", {})
    with pytest.raises(ValueError):
        await client.multi_zget("")
    with pytest.raises(ValueError):
        await client.multi_zget_slice("")
    with pytest.raises(ValueError):
        await client.multi_zdel("")

    mock_transport.do.assert_not_awaited()

@pytest.mark.asyncio
async def test_zlist_rejects_non_string_names(client, mock_transport):
    with pytest.raises(TypeError):
        await client.zlist(None, "", 10)

    mock_transport.do.assert_not_awaited()
