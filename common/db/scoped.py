"""
Operation-scoped database sessions.

Connections are acquired per repository operation and released right
after, so nothing holds a connection while a Stripe request is in flight.

Usage:
    async with get_session() as session:
        tenant = await session.get(TenantEntity, tenant_id)

    async with transaction():
        await subscription_repo.upsert(...)
        await tenant_repo.update(...)
    # both writes commit together

See also:
    - common/db/context.py: @readonly, @transactional
    - common/db/session.py: request-scoped sessions (get_db)
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from common.core.otel_axiom_exporter import get_logger
from common.db.session import AsyncSessionLocal, AsyncSessionLocalReadonly
from common.db.context import (
    get_current_session,
    set_current_session,
    reset_current_session,
    is_readonly_forced,
)

logger = get_logger(__name__)


def _session_factory(readonly: bool) -> async_sessionmaker:
    return AsyncSessionLocalReadonly if readonly else AsyncSessionLocal


async def _finish(session: AsyncSession, readonly: bool) -> None:
    if readonly:
        return
    start = time.perf_counter()
    await session.commit()
    logger.debug(f"Commit: {(time.perf_counter() - start) * 1000:.2f}ms")


@asynccontextmanager
async def transaction(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """
    Explicit transaction boundary.

    Every get_session() inside shares one session, committed once on
    success and rolled back on exception. A nested transaction() joins the
    enclosing one and leaves the commit to it.
    """
    readonly = readonly or is_readonly_forced()
    existing = get_current_session(readonly=readonly)
    if existing:
        yield existing
        return

    async with _session_factory(readonly)() as session:
        token = set_current_session(session, readonly=readonly)
        try:
            yield session
            await _finish(session, readonly)
        except Exception as e:
            logger.error(f"Transaction rollback (readonly={readonly}): {e}")
            await session.rollback()
            raise
        finally:
            reset_current_session(token, readonly=readonly)


@asynccontextmanager
async def get_session(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for a single DB operation.

    Inside a transaction() this is the transaction's session. Otherwise a
    fresh session is committed and released when the block exits.
    """
    readonly = readonly or is_readonly_forced()
    existing = get_current_session(readonly=readonly)
    if existing:
        yield existing
        return

    async with _session_factory(readonly)() as session:
        try:
            yield session
            await _finish(session, readonly)
        except Exception as e:
            logger.error(f"Operation rollback: {e}")
            await session.rollback()
            raise
