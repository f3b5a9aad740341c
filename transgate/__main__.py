"""Command-line entry point: ``python -m transgate``."""

import asyncio
import logging
import sys

from transgate.config import get_settings
from transgate.core.errors import ConfigError
from transgate.core.llm import ProviderRegistry
from transgate.lifecycle import LifecycleManager
from transgate.main import create_app

logger = logging.getLogger("transgate")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(filename)s:%(lineno)d %(message)s"


def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    # Provider state must be complete before the listener starts
    try:
        registry = ProviderRegistry.from_file(settings.models_config_file)
    except ConfigError as e:
        logger.error("Cannot start without a valid provider configuration: %s", e)
        return 1

    app = create_app(registry, settings=settings)
    manager = LifecycleManager(
        app,
        host=settings.host,
        port=settings.resolve_port(registry.port),
        shutdown_timeout=settings.shutdown_timeout,
        keep_alive_timeout=settings.keep_alive_timeout,
        log_level=settings.log_level,
    )
    asyncio.run(manager.run())
    return 0


if __name__ == "__main__":
    sys.exit(main())
