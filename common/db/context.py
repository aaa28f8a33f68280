"""
Database session context.

Context variables that let repositories share one session inside an
explicit transaction, plus decorators for marking a call chain as
read-only or transactional.

Usage:
    # Webhook apply - projection and tenant merge commit together
    @transactional
    async def apply_checkout(...):
        await subscription_repo.upsert(...)
        await tenant_repo.update(...)

    # Reporting - all reads go through the read session
    @readonly
    async def get_summary():
        ...
"""

from contextvars import ContextVar
from functools import wraps
from typing import Optional, Callable, TypeVar, ParamSpec

from sqlalchemy.ext.asyncio import AsyncSession


# =============================================================================
# Context Variables
# =============================================================================

_write_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "db_write_session", default=None
)

_read_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "db_read_session", default=None
)

_force_readonly: ContextVar[bool] = ContextVar("db_force_readonly", default=False)


# =============================================================================
# Context Accessors
# =============================================================================


def is_readonly_forced() -> bool:
    """Check if current context is forced to readonly."""
    return _force_readonly.get()


def get_current_session(readonly: bool = False) -> Optional[AsyncSession]:
    """
    Get the session of the enclosing transaction, if any.

    A forced-readonly context always resolves to the read session.
    """
    if readonly or is_readonly_forced():
        return _read_session.get()
    return _write_session.get()


def set_current_session(session: AsyncSession, readonly: bool = False) -> object:
    """Set session in context and return the reset token."""
    if readonly:
        return _read_session.set(session)
    return _write_session.set(session)


def reset_current_session(token: object, readonly: bool = False) -> None:
    """Reset session context using token from set_current_session."""
    if readonly:
        _read_session.reset(token)
    else:
        _write_session.reset(token)


def in_transaction(readonly: bool = False) -> bool:
    return get_current_session(readonly=readonly) is not None


# =============================================================================
# Decorators
# =============================================================================

P = ParamSpec("P")
T = TypeVar("T")


def readonly(func: Callable[P, T]) -> Callable[P, T]:
    """Force every DB operation in this call chain onto the read session."""

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        token = _force_readonly.set(True)
        try:
            return await func(*args, **kwargs)
        finally:
            _force_readonly.reset(token)

    return wrapper


def transactional(func: Callable[P, T]) -> Callable[P, T]:
    """
    Wrap the function in one explicit transaction.

    Every repository call inside shares a session and the writes commit or
    roll back together. Do not call the payment provider from inside.
    """

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        from common.db.scoped import transaction as tx  # noqa: PLC0415

        async with tx():
            return await func(*args, **kwargs)

    return wrapper
