"""Shared test fixtures for the profile store test suite."""

import pytest


# ── Database Pool Mock ──


class FakeRecord(dict):
    """Mimics asyncpg.Record: supports both dict-style and attribute access."""
    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key)


class FakeConnection:
    """Mock asyncpg connection with configurable return values.

    ``fetchval_results`` is consumed in order; once empty, ``fetchval_result``
    is returned. Setting ``error`` makes the next call raise it.
    ``execute_errors`` maps a query substring to the exception execute raises.
    """

    def __init__(self):
        self.execute_results: list[str] = ["INSERT 0 1"]
        self.execute_errors: dict[str, Exception] = {}
        self.fetch_results: list[list[dict]] = [[]]
        self.fetchval_results: list = []
        self.fetchval_result = 1
        self.error: Exception | None = None
        self.transactions: list["FakeTransaction"] = []
        self._execute_calls: list[tuple] = []
        self._fetch_calls: list[tuple] = []
        self._fetchval_calls: list[tuple] = []

    def _maybe_raise(self):
        if self.error is not None:
            error, self.error = self.error, None
            raise error

    async def execute(self, query, *args):
        self._execute_calls.append((query, args))
        self._maybe_raise()
        for fragment, error in self.execute_errors.items():
            if fragment in query:
                raise error
        return self.execute_results[0] if self.execute_results else "UPDATE 0"

    async def fetch(self, query, *args):
        self._fetch_calls.append((query, args))
        self._maybe_raise()
        result = self.fetch_results.pop(0) if self.fetch_results else []
        return [FakeRecord(r) for r in result]

    async def fetchval(self, query, *args):
        self._fetchval_calls.append((query, args))
        self._maybe_raise()
        if self.fetchval_results:
            return self.fetchval_results.pop(0)
        return self.fetchval_result

    def transaction(self):
        tx = FakeTransaction()
        self.transactions.append(tx)
        return tx


class FakeTransaction:
    def __init__(self):
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True
        return False


class FakePool:
    """Mock asyncpg.Pool that yields a FakeConnection."""

    def __init__(self):
        self.conn = FakeConnection()
        self.acquired = 0
        self.closed = False

    def acquire(self):
        self.acquired += 1
        return FakePoolContext(self.conn)

    async def close(self):
        self.closed = True


class FakePoolContext:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *args):
        pass


@pytest.fixture
def fake_pool():
    """Provide a mock database pool."""
    return FakePool()


@pytest.fixture
def fake_conn(fake_pool):
    """Direct access to the underlying FakeConnection."""
    return fake_pool.conn
