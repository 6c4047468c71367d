from contextlib import asynccontextmanager
from typing import AsyncGenerator

from ssdb_zset.client import ZSetClient
from ssdb_zset.config import Settings, get_settings
from ssdb_zset.core.logging import setup_logging
from ssdb_zset.core.transports.tcp import SSDBTransport


@asynccontextmanager
async def open_client(
    settings: Settings | None = None,
    configure_logging: bool = False,
) -> AsyncGenerator[ZSetClient, None]:
    """
    Client lifecycle manager.
    Builds the TCP transport from settings and closes it on exit.
    """
    settings = settings or get_settings()

    if configure_logging:
        setup_logging(settings.log_level)

    # 1. Initialize Infrastructure
    transport = SSDBTransport(
        host=settings.host,
        port=settings.port,
        timeout=settings.timeout,
        auth=settings.auth,
    )

    # 2. Initialize Core Logic (Dependency Injection)
    client = ZSetClient(transport, strict_scores=settings.strict_scores)

    try:
        yield client
    finally:
        # 3. Cleanup
        await transport.close()
