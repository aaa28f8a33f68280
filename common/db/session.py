import time
from uuid import uuid4

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


def engine_options() -> dict:
    """Engine keyword arguments derived from the database settings."""
    options = {
        "echo": settings.debug,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {"application_name": settings.app_name},
        },
    }

    if settings.db_behind_pgbouncer:
        options["connect_args"]["prepared_statement_name_func"] = (
            lambda: f"__asyncpg_{uuid4()}__"
        )

    if settings.db_use_nullpool:
        logger.info("Using NullPool - no connection pooling")
        options["poolclass"] = pool.NullPool
    else:
        logger.info(
            f"Using connection pooling - pool_size={settings.db_pool_size}, "
            f"max_overflow={settings.db_pool_overflow}"
        )
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_pool_overflow

    return options


engine = create_async_engine(settings.async_database_url, **engine_options())

# Webhook writes and checkout go through the primary
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Entitlement reads, plan listing and the admin summary
AsyncSessionLocalReadonly = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db():
    """Request-scoped session, committed when the endpoint returns."""
    start = time.perf_counter()
    async with AsyncSessionLocal() as session:
        logger.debug(f"Session acquire: {(time.perf_counter() - start) * 1000:.2f}ms")

        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Rolling back billing session: {e}")
            await session.rollback()
            raise


async def get_db_readonly():
    """Request-scoped session that is never committed."""
    async with AsyncSessionLocalReadonly() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Error in readonly billing session: {e}")
            await session.rollback()
            raise
