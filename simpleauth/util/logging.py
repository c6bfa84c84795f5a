"""Stdlib logging levels.

Structured events go through logfire. This only keeps libraries that log via
the stdlib (SQLAlchemy, aiosqlite) at a sensible level.
"""

import logging
import sys

from simpleauth.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure the root logger and quiet third-party loggers.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    # SQL echo is opt-in through storage.echo
    sql_level = logging.INFO if settings.storage.echo else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("simpleauth").setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured: environment=%s, level=%s, store=%s",
        settings.environment,
        logging.getLevelName(level),
        settings.storage.url,
    )
