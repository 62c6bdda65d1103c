"""Anime, genre and review aggregate repositories."""

from collections.abc import Iterable
from typing import Any
import asyncpg
from config.constants import GENRE_SEPARATOR
from storage.errors import translate_errors


def normalize_genres(genres: str | Iterable[str]) -> list[str]:
    """Split a comma-separated string (or clean a list) into unique names, order kept."""
    if isinstance(genres, str):
        genres = genres.split(GENRE_SEPARATOR)
    names: list[str] = []
    for name in genres:
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return names


class AnimeRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @translate_errors
    async def get_all_genres(self) -> list[dict[str, Any]]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch("SELECT DISTINCT genre_name FROM anime_genre")
        return [dict(r) for r in rows]

    @translate_errors
    async def get_by_genre_list(self, genres: str | Iterable[str]) -> list[dict[str, Any]]:
        """Animes tagged with any of the given genres, each anime once."""
        names = normalize_genres(genres)
        if not names:
            return []
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT uid, title, summary, aired, ended, episodes, img_url
                FROM animes
                WHERE uid IN (
                    SELECT anime_id FROM anime_genre
                    WHERE genre_name = ANY($1::text[])
                )
                ORDER BY uid
                """,
                names,
            )
        return [dict(r) for r in rows]


class ReviewRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @translate_errors
    async def get_avg_score(self, anime_title: str) -> float | None:
        """Average review score for the anime(s) titled exactly anime_title."""
        async with self._pool.acquire() as conn:
            avg = await conn.fetchval(
                """
                SELECT AVG(r.score)::float8
                FROM reviews r
                JOIN animes a ON a.uid = r.anime_uid
                WHERE a.title = $1
                """,
                anime_title,
            )
        return float(avg) if avg is not None else None

    @translate_errors
    async def get_top_animes(self, k: int, min_reviews: int) -> list[dict[str, Any]]:
        """Best-scored animes among those with more than min_reviews distinct reviewers."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT a.title, t.avg_score, a.img_url
                FROM (
                    SELECT anime_uid, AVG(score)::float8 AS avg_score
                    FROM reviews
                    GROUP BY anime_uid
                    HAVING COUNT(DISTINCT profile) > $1
                    ORDER BY avg_score DESC, anime_uid
                    LIMIT $2
                ) AS t
                JOIN animes a ON a.uid = t.anime_uid
                ORDER BY t.avg_score DESC, a.uid
                """,
                min_reviews,
                k,
            )
        return [dict(r) for r in rows]

    @translate_errors
    async def get_most_active_users(self, k: int) -> list[dict[str, Any]]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT profile, COUNT(profile) AS num_of_reviews
                FROM reviews
                GROUP BY profile
                ORDER BY num_of_reviews DESC, profile
                LIMIT $1
                """,
                k,
            )
        return [dict(r) for r in rows]
