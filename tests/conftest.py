import sys
from pathlib import Path

import pytest
from psycopg2 import pool as pg_pool

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from pgtable import ClientOptions, Database  # noqa: E402


class FakeBackend:
    """Records every statement and answers with scripted rows or errors."""

    def __init__(self):
        self.executed = []  # (connection id, sql, args)
        self._responses = []
        self.pool = None

    def respond(self, fragment, rows=None, error=None):
        # Later registrations win
        self._responses.insert(0, (fragment, rows, error))

    def fail(self, fragment, error):
        self.respond(fragment, error=error)

    def handle(self, conn, sql, args):
        self.executed.append((conn.id, sql, args))
        for fragment, rows, error in self._responses:
            if fragment in sql:
                if error is not None:
                    raise error
                return rows
        return None

    def statements(self):
        return [sql for _, sql, _ in self.executed]

    def connections_used(self):
        return {conn_id for conn_id, _, _ in self.executed}


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self.statusmessage = None
        self.rowcount = -1
        self._rows = []

    def execute(self, sql, args=None):
        rows = self.conn.backend.handle(self.conn, sql, args)
        verb = sql.split()[0].upper()
        returns_rows = verb == "SELECT" or "RETURNING" in sql.upper()
        rows = [dict(r) for r in (rows or [])]
        if returns_rows or rows:
            self.description = [("column",)]
            self._rows = rows
            self.rowcount = len(rows)
        else:
            self.description = None
            self._rows = []
            self.rowcount = -1
        n = len(rows)
        self.statusmessage = {
            "SELECT": f"SELECT {n}",
            "INSERT": f"INSERT 0 {n}",
            "UPDATE": f"UPDATE {n}",
            "DELETE": f"DELETE {n}",
        }.get(verb, verb)

    def fetchall(self):
        return list(self._rows)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeConnection:
    def __init__(self, backend, conn_id):
        self.backend = backend
        self.id = conn_id
        self.autocommit = False
        self.closed = 0

    def cursor(self, cursor_factory=None):
        return FakeCursor(self)


class FakePool:
    """Stand-in for psycopg2.pool.ThreadedConnectionPool."""

    def __init__(self, backend, minconn, maxconn, **kwargs):
        self.backend = backend
        self.minconn = minconn
        self.maxconn = maxconn
        self.kwargs = kwargs
        self.closed = False
        self.in_use = []
        self.released = []  # (connection id, close)
        self._next_id = 0

    def getconn(self):
        if self.closed:
            raise pg_pool.PoolError("connection pool is closed")
        if len(self.in_use) >= self.maxconn:
            raise pg_pool.PoolError("connection pool exhausted")
        self._next_id += 1
        conn = FakeConnection(self.backend, self._next_id)
        self.in_use.append(conn)
        return conn

    def putconn(self, conn, key=None, close=False):
        self.in_use.remove(conn)
        self.released.append((conn.id, close))

    def closeall(self):
        self.closed = True


@pytest.fixture()
def backend(monkeypatch):
    fake = FakeBackend()

    def _factory(minconn, maxconn, **kwargs):
        fake.pool = FakePool(fake, minconn, maxconn, **kwargs)
        return fake.pool

    monkeypatch.setattr(pg_pool, "ThreadedConnectionPool", _factory)
    return fake


@pytest.fixture()
def query_log():
    return []


@pytest.fixture()
def options(query_log):
    def _record(sql, params, stats):
        query_log.append((sql, params, stats))

    return ClientOptions(user="shop", password="secret", database="shop", logging_fn=_record)


@pytest.fixture()
def db(backend, options):
    database = Database(options)
    yield database
    database.disconnect()


@pytest.fixture()
def products(db):
    return db.table("products")
