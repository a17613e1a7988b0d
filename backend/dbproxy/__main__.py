"""
Run the proxy with uvicorn.

Usage:
    python -m dbproxy

Environment Variables:
    MONGO_URI: Connection template with <PASSWORD> and an empty database path
    MONGO_PASS: Credential substituted for <PASSWORD>
    PORT: HTTP port (default: 3000)
    LOG_LEVEL: Logging level (default: INFO)
"""
import logging
import sys

import uvicorn

from dbproxy.config import get_settings
from dbproxy.core.errors import ConfigError
from dbproxy.core.logging_setup import configure_logging
from dbproxy.database.registry import check_connection_settings

logger = logging.getLogger("dbproxy")


def main() -> int:
    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        check_connection_settings(settings)
    except ConfigError as e:
        configure_logging()
        logger.error(f"Configuration error: {e.message}")
        return 1

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    uvicorn.run(
        "dbproxy.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
