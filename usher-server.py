#!/usr/bin/env python3
"""
Usher Server - launch script

Serves the account and session API with the settings from the
environment / .env file
"""
import sys

import uvicorn

from usher.server.config import get_settings
from usher.server.db import init_database
from usher.server.init import check_environment
from usher.server.logger import get_logger
from usher.server.server import create_app

logger = get_logger("UsherServer")

settings = get_settings()

app = create_app(settings)


if __name__ == "__main__":
    if settings.store_backend == "sqlite":
        init_database(settings.sqlite_path)

    if not check_environment():
        logger.error("Environment check failed, not starting")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("Usher Server starting...")
    logger.info(f"HTTP: http://{settings.host}:{settings.port}")
    logger.info(f"Store: {settings.store_backend}")
    logger.info("=" * 60)

    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")
    except KeyboardInterrupt:
        logger.info("Stop requested, shutting down...")
