"""Logfire setup for the authentication layer.

Modules log with ``logfire`` directly:

    logfire.info("Credential linked", user_id=user.id, provider_id=provider_id)

    with logfire.span("credential_link.complete", user_id=user.id):
        ...

Credentials never appear in attributes. The scrubbing patterns below also
redact anything that slips through under a telling name.
"""

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from simpleauth.config import Settings

# Attribute names redacted on top of logfire's default patterns
SCRUB_PATTERNS = ["credential", "id_token", "nonce"]


def _should_send(settings: Settings) -> bool:
    """Explicit setting wins, otherwise send only when a token is configured."""
    explicit = settings.observability.send_to_logfire
    if explicit is not None:
        return explicit
    return bool(settings.observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the host process.

    Console output is always on. Events reach Logfire cloud only when
    ``_should_send`` allows it.

    Args:
        settings: Application settings
    """
    send_to_logfire = _should_send(settings)

    logfire.configure(
        service_name="simpleauth",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=settings.observability.logfire_token,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
        scrubbing=logfire.ScrubbingOptions(extra_patterns=SCRUB_PATTERNS),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        shared_store=settings.secure_store.share_across_apps,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace statements against the device store.

    Args:
        engine: Engine backing the secure item table
    """
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)
    logfire.info("Device store instrumented", dialect=engine.dialect.name)
