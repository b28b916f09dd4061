import asyncio
import logging
import pathlib

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from bloodlink.config import settings

logger = logging.getLogger(__name__)

# Create an async engine
engine = create_async_engine(f"sqlite+aiosqlite:///{settings.DB_PATH}")

# Create a sync engine for Alembic migrations
sync_engine = create_engine(f"sqlite:///{settings.DB_PATH}")

# Create a session factory
SessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def _run_migrations() -> bool:
    """Apply Alembic migrations to head; False when no alembic.ini is shipped."""
    from alembic import command
    from alembic.config import Config as AlembicConfig

    # Locate alembic.ini next to project root
    root_path = pathlib.Path(__file__).resolve().parent.parent
    alembic_ini = root_path / "alembic.ini"
    if not alembic_ini.exists():
        return False
    cfg = AlembicConfig(str(alembic_ini))
    cfg.set_main_option("script_location", str(root_path / "alembic"))
    # Alembic is synchronous, so it gets the plain sqlite driver
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{settings.DB_PATH}")
    # keep the application's logging configuration
    cfg.attributes["configure_logger"] = False
    command.upgrade(cfg, "head")
    return True


async def init_db(db_engine: AsyncEngine | None = None) -> None:
    """Initializes the database and creates tables if they don't exist.

    Migrations only run against the configured database file; an explicit
    *db_engine* (tests, tooling) just gets ``create_all``.
    """
    if db_engine is None:
        db_engine = engine
        try:
            loop = asyncio.get_running_loop()
            migrated = await loop.run_in_executor(None, _run_migrations)
            if migrated:
                logger.info("alembic migrations applied to %s", settings.DB_PATH)
        except Exception:
            logger.exception("alembic_migration_error")

    # Ensure all models are imported so SQLModel metadata includes them
    import bloodlink.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
