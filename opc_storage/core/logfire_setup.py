"""Logfire observability configuration."""

import logfire

from opc_storage.core.config import Settings, settings


def setup_logfire(config: Settings | None = None) -> None:
    """Configure Logfire instrumentation.

    Only configures Logfire if LOGFIRE_TOKEN is provided.
    Otherwise, disables sending telemetry to avoid export errors.
    """
    config = config or settings
    if not config.LOGFIRE_TOKEN:
        logfire.configure(send_to_logfire=False)
        return

    logfire.configure(
        token=config.LOGFIRE_TOKEN,
        service_name=config.LOGFIRE_SERVICE_NAME,
        environment=config.LOGFIRE_ENVIRONMENT,
        send_to_logfire=True,
    )


def instrument_httpx() -> None:
    """Instrument httpx so every storage request is traced."""
    logfire.instrument_httpx()
