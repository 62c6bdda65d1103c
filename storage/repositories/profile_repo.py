"""Profile and favorites repository."""

from datetime import date
from typing import Any
import asyncpg
import structlog
from config.constants import PROFILE_LIST_LIMIT, PROFILES_LOCK_MODE
from storage.errors import UsernameTakenError, translate_errors

log = structlog.get_logger(__name__)

PROFILE_NAME_CONSTRAINT = "profiles_profile_name_key"


def _as_date(value: date | str | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


class ProfileRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @translate_errors
    async def list_profiles(self) -> list[dict[str, Any]]:
        """A small unordered sample of profiles."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT id, profile_name, gender, birthday FROM profiles LIMIT $1",
                PROFILE_LIST_LIMIT,
            )
        return [dict(r) for r in rows]

    @translate_errors
    async def get_profile_name(self, profile_id: int) -> list[dict[str, Any]]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT profile_name FROM profiles WHERE id = $1", profile_id
            )
        return [dict(r) for r in rows]

    @translate_errors
    async def count_profiles(self) -> int:
        async with self._pool.acquire() as conn:
            return await conn.fetchval("SELECT COUNT(profile_name) FROM profiles")

    @translate_errors
    async def is_username_taken(self, username: str) -> bool:
        async with self._pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT EXISTS(SELECT 1 FROM profiles WHERE profile_name = $1)",
                username,
            )

    @translate_errors
    async def create_user(
        self,
        profile_name: str,
        gender: str | None,
        birthday: date | str | None,
        password: str,
    ) -> int:
        """Insert a profile with id = current profile count + 1.

        The name check, id computation and insert share one transaction that
        holds a table lock, so concurrent callers cannot both pass the check
        or compute the same id. Returns the new id.
        """
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(f"LOCK TABLE profiles IN {PROFILES_LOCK_MODE} MODE")
                taken = await conn.fetchval(
                    "SELECT EXISTS(SELECT 1 FROM profiles WHERE profile_name = $1)",
                    profile_name,
                )
                if taken:
                    log.info("username_taken", profile_name=profile_name)
                    raise UsernameTakenError(profile_name)

                total = await conn.fetchval("SELECT COUNT(profile_name) FROM profiles")
                new_id = total + 1
                try:
                    await conn.execute(
                        """
                        INSERT INTO profiles (id, profile_name, password, gender, birthday)
                        VALUES ($1, $2, $3, $4, $5)
                        """,
                        new_id,
                        profile_name,
                        password,
                        gender,
                        _as_date(birthday),
                    )
                except asyncpg.UniqueViolationError as e:
                    if getattr(e, "constraint_name", None) != PROFILE_NAME_CONSTRAINT:
                        raise
                    log.info("username_taken", profile_name=profile_name)
                    raise UsernameTakenError(profile_name) from e

        log.info("user_created", profile_id=new_id, profile_name=profile_name)
        return new_id

    @translate_errors
    async def check_credentials(self, username: str, password: str) -> bool:
        """Exact, case-sensitive match on both name and password."""
        async with self._pool.acquire() as conn:
            found = await conn.fetchval(
                """
                SELECT EXISTS(
                    SELECT 1 FROM profiles WHERE profile_name = $1 AND password = $2
                )
                """,
                username,
                password,
            )
        log.debug("credentials_checked", profile_name=username, found=found)
        return found

    @translate_errors
    async def get_favorite_animes(self, profile_id: int) -> list[dict[str, Any]]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT a.title, a.img_url
                FROM favorites f
                JOIN animes a ON f.fav_anime_id = a.uid
                WHERE f.profile_id = $1
                """,
                profile_id,
            )
        return [dict(r) for r in rows]
