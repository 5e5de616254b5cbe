"""
Usher Server - app factory and launcher
"""
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, get_settings
from .db import init_database
from .endpoints import router
from .init import migrate_database, check_database
from .logger import get_logger
from .store import MemoryUserStore, UserStore

logger = get_logger("UsherServer")


def create_app(settings: Optional[Settings] = None, store: Optional[UserStore] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: defaults to the process-wide settings
        store: use this record store instead of the configured backend
    """
    settings = settings or get_settings()

    if store is None and settings.store_backend == "memory":
        store = MemoryUserStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Usher starting...")
        if app.state.store is None:
            init_database(settings.sqlite_path)
            migrate_database()
            logger.info(f"Using SQLite store at {settings.sqlite_path}")
        else:
            logger.info(f"Using {type(app.state.store).__name__}")
        yield
        logger.info("Usher shutting down...")

    app = FastAPI(
        title="Usher Server",
        description="User accounts and login sessions",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store

    app.include_router(router)

    return app


class UsherServer:
    """
    Usher server

    Examples:
        >>> server = UsherServer(db_path="usher.db")
        >>> server.run()

        >>> server = UsherServer(db_path="data/users.db", host="127.0.0.1", port=9000)
        >>> server.run()
    """

    def __init__(
        self,
        db_path: str,
        host: str = "0.0.0.0",
        port: int = 8000
    ):
        """
        Args:
            db_path: SQLite database path (required)
            host: listen address, default 0.0.0.0
            port: listen port, default 8000
        """
        self.db_path = db_path
        self.host = host
        self.port = port

        self._app: Optional[FastAPI] = None

    def _validate_config(self):
        """Check the required settings"""
        errors = []

        if not self.db_path:
            errors.append("no database path configured")

        if self.port < 1 or self.port > 65535:
            errors.append(f"invalid port {self.port}, must be within 1-65535")

        if errors:
            logger.error("Configuration invalid:")
            for error in errors:
                logger.error(f"  {error}")
            raise ValueError("Required configuration missing, cannot start")

        logger.info(f"Configuration ok, database: {self.db_path}")

    def _check_database(self):
        """Bind the database and create missing tables"""
        logger.info("Checking database...")
        init_database(self.db_path)
        migrate_database()
        check_database()

    def run(self):
        """
        Start the HTTP server and block until it stops

        Raises:
            ValueError: invalid configuration
        """
        import uvicorn

        try:
            logger.info("=" * 60)
            logger.info("Usher Server starting...")
            logger.info("=" * 60)

            self._validate_config()
            self._check_database()

            settings = Settings(
                sqlite_path=self.db_path,
                store_backend="sqlite",
                host=self.host,
                port=self.port,
            )
            self._app = create_app(settings)

            logger.info(f"Listening on http://{self.host}:{self.port}")
            uvicorn.run(self._app, host=self.host, port=self.port, log_level="info")

        except KeyboardInterrupt:
            logger.info("Stop requested, shutting down...")

        except Exception as e:
            logger.exception(f"Server failed to start: {e}")
            sys.exit(1)
