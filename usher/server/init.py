"""
Server initialisation
Responsibilities: table migration, reset, and environment checks run at startup
"""
from pathlib import Path

from .logger import get_logger
from .config import get_settings
from .db import db_proxy, get_all_tables

logger = get_logger("ServerInit")


def init_database():
    """Drop and recreate every table"""
    db_proxy.connect(reuse_if_open=True)

    try:
        tables = get_all_tables()

        for table in reversed(tables):
            if table.table_exists():
                logger.info(f"Dropping table: {table._meta.table_name}")
                table.drop_table()

        for table in tables:
            logger.info(f"Creating table: {table._meta.table_name}")
            table.create_table()

        logger.info("Database initialised")

    except Exception as e:
        logger.error(f"Database initialisation failed: {e}")
        raise
    finally:
        db_proxy.close()


def migrate_database():
    """Create missing tables, keeping existing data"""
    db_proxy.connect(reuse_if_open=True)

    try:
        for table in get_all_tables():
            if not table.table_exists():
                logger.info(f"Creating table: {table._meta.table_name}")
                table.create_table()
            else:
                logger.debug(f"Table exists: {table._meta.table_name}")

        logger.info("Database migration done")

    except Exception as e:
        logger.error(f"Database migration failed: {e}")
        raise
    finally:
        db_proxy.close()


def reset_database():
    """Wipe and rebuild the database (development only)"""
    logger.warning("Resetting the database, all users will be lost")
    init_database()


def check_database() -> bool:
    """Log which tables exist"""
    try:
        db_proxy.connect(reuse_if_open=True)
        logger.info("Checking database tables...")
        for table in get_all_tables():
            exists = "present" if table.table_exists() else "missing"
            logger.info(f"{table._meta.table_name}: {exists}")
        db_proxy.close()
        return True
    except Exception as e:
        logger.error(f"Database check failed: {e}")
        return False


def check_sqlite() -> bool:
    """
    Check that the SQLite file can be opened

    Returns:
        bool: whether SQLite is usable
    """
    settings = get_settings()
    db_path = Path(settings.sqlite_path)

    try:
        db_dir = db_path.parent
        if not db_dir.exists():
            db_dir.mkdir(parents=True, exist_ok=True)

        db_proxy.connect(reuse_if_open=True)
        db_proxy.close()

        return True

    except PermissionError as e:
        logger.error(f"SQLite permission error: cannot access {settings.sqlite_path}")
        logger.error(f"   {e}")
        return False
    except Exception as e:
        logger.error(f"SQLite check failed: {e}")
        return False


def check_environment() -> bool:
    """
    Run every startup check

    Returns:
        bool: whether all checks passed
    """
    if get_settings().store_backend == "memory":
        return True

    checks = [
        ("SQLite", check_sqlite),
    ]

    results = []
    for name, check_func in checks:
        try:
            results.append(check_func())
        except Exception as e:
            logger.error(f"{name} check raised: {e}")
            results.append(False)

    if all(results):
        return True

    logger.error("=" * 60)
    logger.error("Environment check failed")
    logger.error("Check that the SQLite path (USHER_SQLITE_PATH) is writable")
    logger.error("=" * 60)
    return False
