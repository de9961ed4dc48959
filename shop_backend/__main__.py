"""
Run the shop backend under uvicorn: ``python -m shop_backend``.
"""

import logging

import uvicorn

from shop_backend.app import configure_logging
from shop_backend.config import get_settings

logger = logging.getLogger(__name__)


def main():
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting shop backend on %s:%d", settings.host, settings.port)
    uvicorn.run(
        "shop_backend.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
