"""ProfileStore: the public query catalog over one injected pool.

Every method borrows a pooled connection for the duration of its statement
and returns decoded rows (``list[dict]``) or a scalar. Failures are raised
as :class:`storage.errors.StoreError` subclasses, never returned.
"""

from collections.abc import Iterable
from datetime import date
from typing import Any
import asyncpg
from storage.repositories.anime_repo import AnimeRepository, ReviewRepository
from storage.repositories.profile_repo import ProfileRepository


class ProfileStore:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.profiles = ProfileRepository(pool)
        self.animes = AnimeRepository(pool)
        self.reviews = ReviewRepository(pool)

    # ── Profiles ──

    async def list_profiles(self) -> list[dict[str, Any]]:
        return await self.profiles.list_profiles()

    async def get_profile_name(self, profile_id: int) -> list[dict[str, Any]]:
        """Rows (zero or one) holding the profile_name for that id."""
        return await self.profiles.get_profile_name(profile_id)

    async def count_profiles(self) -> int:
        return await self.profiles.count_profiles()

    async def is_username_taken(self, username: str) -> bool:
        return await self.profiles.is_username_taken(username)

    async def create_user(
        self,
        profile_name: str,
        gender: str | None,
        birthday: date | str | None,
        password: str,
    ) -> int:
        """Create a profile and return its id.

        Raises UsernameTakenError if profile_name already exists.
        """
        return await self.profiles.create_user(profile_name, gender, birthday, password)

    async def check_credentials(self, username: str, password: str) -> bool:
        return await self.profiles.check_credentials(username, password)

    async def get_user_favorite_animes(self, profile_id: int) -> list[dict[str, Any]]:
        return await self.profiles.get_favorite_animes(profile_id)

    # ── Animes & reviews ──

    async def get_anime_avg_score(self, anime_title: str) -> float | None:
        return await self.reviews.get_avg_score(anime_title)

    async def get_top_animes(self, k: int, min_reviews: int) -> list[dict[str, Any]]:
        return await self.reviews.get_top_animes(k, min_reviews)

    async def get_all_genres(self) -> list[dict[str, Any]]:
        return await self.animes.get_all_genres()

    async def get_anime_by_genre_list(
        self, genres: str | Iterable[str]
    ) -> list[dict[str, Any]]:
        """Animes in any of the genres; accepts "Action, Drama" or a list."""
        return await self.animes.get_by_genre_list(genres)

    async def get_most_active_users(self, k: int) -> list[dict[str, Any]]:
        return await self.reviews.get_most_active_users(k)
