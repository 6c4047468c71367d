import asyncio

import structlog

from ssdb_zset.core.errors import ProtocolError
from ssdb_zset.core.transports.base import Transport
from ssdb_zset.core.wire import encode_request, read_response

logger = structlog.get_logger()


class SSDBTransport(Transport):
    """
    TCP transport speaking the SSDB block protocol.

    Connects lazily on the first round trip and keeps the connection open.
    Round trips are serialised with a lock, so one instance can be shared by
    concurrent tasks. Any failure drops the connection; the next call
    reconnects. Nothing is retried.

    ``timeout`` is one deadline per call, covering connecting, auth and the
    command round trip together.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8888,
        timeout: float = 5.0,
        auth: str | None = None,
    ):
        self._host = host
        self._port = port
        self._timeout = timeout
        self._auth = auth
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def do(self, command: str, *args: str) -> list[str]:
        async with self._lock:
            try:
                return await asyncio.wait_for(
                    self._call(command, *args), timeout=self._timeout
                )
            except (OSError, EOFError, TimeoutError, ProtocolError, asyncio.CancelledError):
                await self._drop()
                raise

    async def close(self) -> None:
        async with self._lock:
            if self._writer is not None:
                await self._drop()
                logger.info("ssdb_closed", host=self._host, port=self._port)

    async def _call(self, command: str, *args: str) -> list[str]:
        if not self.connected:
            await self._connect()
        return await self._round_trip(command, *args)

    async def _connect(self) -> None:
        self._reader, self._writer = await asyncio.open_connection(self._host, self._port)
        logger.info("ssdb_connected", host=self._host, port=self._port)

        if self._auth:
            reply = await self._round_trip("auth", self._auth)
            if not reply or reply[0] != "ok":
                raise ConnectionRefusedError(f"auth rejected: {' '.join(reply)}")

    async def _round_trip(self, command: str, *args: str) -> list[str]:
        assert self._reader is not None and self._writer is not None
        self._writer.write(encode_request(command, *args))
        await self._writer.drain()
        return await read_response(self._reader)

    async def _drop(self) -> None:
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            # The peer may already be gone.
            pass
