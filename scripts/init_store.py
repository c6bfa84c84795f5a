#!/usr/bin/env python3
"""Create the device-local store schema with Logfire error tracking."""

import asyncio
import sys

import logfire

from simpleauth.config import Settings
from simpleauth.persistence.database import create_engine, create_schema
from simpleauth.util.logging import setup_logging
from simpleauth.util.observability import configure_logfire


async def init_store(settings: Settings) -> None:
    engine = create_engine(settings)
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()


def main() -> int:
    """Create tables and log any errors to Logfire."""
    settings = Settings()

    setup_logging(settings)
    configure_logfire(settings)

    try:
        logfire.info("Creating store schema", url=settings.storage.url)
        asyncio.run(init_store(settings))
        logfire.info("Store schema ready")
        return 0

    except Exception as e:
        logfire.error(
            "Store initialization failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the caller sees a non-zero exit
        raise


if __name__ == "__main__":
    sys.exit(main())
