"""Async PostgreSQL connection pool owner."""

import asyncpg
import structlog
from pathlib import Path
from config.settings import Settings, settings as default_settings
from storage.errors import DatabaseNotConnectedError

log = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class Database:
    """Owns one asyncpg pool for the lifetime of the process.

    Create it at startup, ``await connect()`` (or use it as an async context
    manager), hand ``pool`` to the repositories, and ``await close()`` on
    shutdown. The embedding process calls
    ``config.logging_config.setup_logging()`` once before connecting so the
    structlog events emitted here and by the repositories are rendered.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or default_settings
        self._pool: asyncpg.Pool | None = None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise DatabaseNotConnectedError("Database.connect() has not been called")
        return self._pool

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> asyncpg.Pool:
        """Create the pool. Calling it again returns the existing pool."""
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                self._settings.dsn,
                min_size=self._settings.db_pool_min_size,
                max_size=self._settings.db_pool_max_size,
                command_timeout=self._settings.db_command_timeout,
            )
            log.info(
                "database_pool_created",
                min_size=self._settings.db_pool_min_size,
                max_size=self._settings.db_pool_max_size,
            )
        return self._pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            log.info("database_pool_closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
        """Apply pending SQL migration files in filename order.

        Returns the names of the files applied by this call.
        """
        applied_now: list[str] = []
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS _migrations (
                    filename VARCHAR(255) PRIMARY KEY,
                    applied_at TIMESTAMPTZ DEFAULT NOW()
                )
            """)

            applied = {
                row["filename"]
                for row in await conn.fetch("SELECT filename FROM _migrations")
            }

            for migration_file in sorted(migrations_dir.glob("*.sql")):
                if migration_file.name in applied:
                    continue

                log.info("applying_migration", filename=migration_file.name)
                sql = migration_file.read_text()
                async with conn.transaction():
                    await conn.execute(sql)
                    await conn.execute(
                        "INSERT INTO _migrations (filename) VALUES ($1)",
                        migration_file.name,
                    )
                applied_now.append(migration_file.name)
                log.info("migration_applied", filename=migration_file.name)
        return applied_now
