"""Store exceptions and the decorator that translates driver failures."""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar
import asyncpg
import structlog

log = structlog.get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Everything the driver or the network can raise while running a statement
DRIVER_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


class StoreError(Exception):
    """Base class for every failure raised by the store."""


class QueryError(StoreError):
    """A statement failed: connectivity loss, constraint or driver error."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class UsernameTakenError(StoreError):
    """create_user was called with a profile_name that already exists."""

    def __init__(self, username: str) -> None:
        super().__init__(f"username already taken: {username!r}")
        self.username = username


class DatabaseNotConnectedError(StoreError):
    """The pool was used before Database.connect() or after close()."""


def translate_errors(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Re-raise driver failures from a repository coroutine as QueryError."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except StoreError:
            raise
        except DRIVER_ERRORS as e:
            log.error("query_failed", operation=func.__name__, error=str(e))
            raise QueryError(func.__name__, e) from e

    return wrapper
