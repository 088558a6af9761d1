"""Process entry point: ``python -m gardensite`` or the ``gardensite`` script.

Takes no command-line arguments; everything comes from the environment
(``PORT``, ``ENV``, ``APP_VERSION``, ``LOG_LEVEL``, ``PAGE_CACHE``).
"""

import logging
import sys
from pathlib import Path

from gardensite.config import SiteConfig
from gardensite.errors import ConfigurationError

logger = logging.getLogger("gardensite.server")

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send gardensite logs to stderr at *level*."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main() -> None:
    """Resolve configuration, build the site, and serve until shutdown.

    Exits with status 1 when the working directory can't be resolved, the
    configuration is invalid, or the port can't be bound.
    """
    try:
        config = SiteConfig.from_env()
    except ConfigurationError as exc:
        configure_logging("info")
        logger.critical("Failed to start server: %s", exc)
        raise SystemExit(1) from exc

    configure_logging(config.log_level)

    try:
        workdir = Path.cwd()
    except OSError as exc:
        logger.critical("Failed to get working directory: %s", exc)
        raise SystemExit(1) from exc

    from gardensite.site import create_app

    app = create_app(config, workdir)

    if config.debug:
        app.print_routes()

    logger.info("Starting %s on port %s", config.app_name, config.port)
    try:
        app.run()
    except OSError as exc:
        logger.critical("Failed to start server: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
