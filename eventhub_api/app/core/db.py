"""
SQLite-backed entity store and simple migration system.

``EntityStore`` owns every read and write of users, events and the
attendee relation.  Connections are opened per store call (or per
write transaction) with a busy timeout, rows are returned as plain
dictionaries, and the soft-delete predicate is applied here so that
callers never repeat ``is_deleted = 0`` in their own code.

The attendee relation is kept only in ``event_attendees``; an event's
attendee list and a user's registered events are both read from it.
Write paths that must check and modify state atomically run inside
``transaction()``, which takes SQLite's write lock up front
(``BEGIN IMMEDIATE``) so that concurrent writers are serialised.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from .errors import StoreError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# SQLite INTEGER is a signed 64-bit value.
SQLITE_MAX_INT = 2**63 - 1
SQLITE_MIN_INT = -(2**63)

TABLE_COLUMNS: Dict[str, tuple] = {
    "users": ("id", "username", "email", "password", "is_deleted", "created_at", "updated_at"),
    "events": (
        "id",
        "name",
        "description",
        "date",
        "capacity",
        "price",
        "rating",
        "creator",
        "is_deleted",
        "created_at",
        "updated_at",
    ),
}

MIGRATIONS: List[tuple] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL,
            email TEXT NOT NULL,
            password TEXT NOT NULL,
            is_deleted INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT NOT NULL,
            date TIMESTAMP NOT NULL,
            capacity INTEGER NOT NULL CHECK (capacity > 0),
            price REAL NOT NULL CHECK (price >= 0),
            rating REAL NOT NULL DEFAULT 0,
            creator INTEGER NOT NULL,
            is_deleted INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(creator) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS event_attendees (
            event_id INTEGER NOT NULL,
            user_id INTEGER NOT NULL,
            registered_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (event_id, user_id),
            FOREIGN KEY(event_id) REFERENCES events(id),
            FOREIGN KEY(user_id) REFERENCES users(id)
        );
        """,
    ),
    # Migration 2: lookup indices and active-only email uniqueness
    (
        2,
        """
        -- A deactivated account releases its email for a new registration.
        CREATE UNIQUE INDEX IF NOT EXISTS idx_users_active_email
            ON users(email) WHERE is_deleted = 0;
        CREATE INDEX IF NOT EXISTS idx_events_creator ON events(creator);
        CREATE INDEX IF NOT EXISTS idx_events_date ON events(date);
        CREATE INDEX IF NOT EXISTS idx_event_attendees_user_id ON event_attendees(user_id);
        """,
    ),
]


def to_db_timestamp(value: datetime) -> str:
    """Render ``value`` as a fixed-width UTC string.

    Fixed width keeps lexicographic order equal to chronological order,
    which the date filters rely on.  Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def fits_sqlite_int(value: Any) -> bool:
    """False for Python ints SQLite cannot bind; such ids match no row."""
    return not isinstance(value, int) or SQLITE_MIN_INT <= value <= SQLITE_MAX_INT


def from_db_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are used as is; relative paths are resolved against
    the project root.
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def _rollback(conn: sqlite3.Connection) -> None:
    if conn.in_transaction:
        conn.execute("ROLLBACK")


class EntityStore:
    """CRUD and query access to the ``users`` and ``events`` tables."""

    def __init__(self, database_url: str, timeout: float = 5.0) -> None:
        self.database_path = resolve_database_path(database_url)
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Connections and transactions
    # ------------------------------------------------------------------
    def get_connection(self) -> sqlite3.Connection:
        """Open a new autocommit connection with the busy timeout applied."""
        try:
            conn = sqlite3.connect(
                self.database_path,
                timeout=self.timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            logger.error("Cannot open database %s: %s", self.database_path, exc)
            raise StoreError(str(exc)) from exc
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection for reads and single-statement writes."""
        conn = self.get_connection()
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.error("Store call failed: %s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection holding the database write lock.

        Everything executed on the connection commits together when the
        block exits normally and is rolled back on any exception.
        """
        conn = self.get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as exc:
            _rollback(conn)
            logger.error("Transaction aborted: %s", exc)
            raise StoreError(str(exc)) from exc
        except BaseException:
            _rollback(conn)
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        with self.transaction() as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
            row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0
            for version, sql in MIGRATIONS:
                if version <= current_version:
                    continue
                # executescript would commit the open transaction, so run
                # the statements one at a time.
                for statement in _split_statements(sql):
                    conn.execute(statement)
                conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                logger.info("Applied migration %s", version)

    # ------------------------------------------------------------------
    # Low level helpers
    # ------------------------------------------------------------------
    def _fetch(self, sql: str, params: Sequence[Any], conn: Optional[sqlite3.Connection]) -> List[Dict[str, Any]]:
        if conn is not None:
            return [dict(row) for row in conn.execute(sql, tuple(params)).fetchall()]
        with self.connection() as own:
            return [dict(row) for row in own.execute(sql, tuple(params)).fetchall()]

    def _execute(self, sql: str, params: Sequence[Any], conn: Optional[sqlite3.Connection]) -> int:
        if conn is not None:
            return conn.execute(sql, tuple(params)).rowcount
        with self.connection() as own:
            return own.execute(sql, tuple(params)).rowcount

    @staticmethod
    def _columns(table: str) -> tuple:
        try:
            return TABLE_COLUMNS[table]
        except KeyError:
            raise ValueError(f"Unknown table {table!r}") from None

    @staticmethod
    def active(alias: Optional[str] = None) -> str:
        """SQL predicate selecting rows that are not soft-deleted."""
        return f"{alias}.is_deleted = 0" if alias else "is_deleted = 0"

    def _where(self, table: str, criteria: Mapping[str, Any], include_deleted: bool) -> tuple:
        columns = self._columns(table)
        clauses: List[str] = []
        params: List[Any] = []
        for key, value in criteria.items():
            if key not in columns:
                raise ValueError(f"Unknown column {key!r} for {table}")
            clauses.append(f"{key} = ?")
            params.append(value)
        if not include_deleted:
            clauses.append(self.active())
        where = " WHERE " + " AND ".join(clauses) if clauses else ""
        return where, params

    def _order_by(self, table: str, order_by: Iterable[str]) -> str:
        columns = self._columns(table)
        parts: List[str] = []
        for key in order_by:
            direction = "DESC" if key.startswith("-") else "ASC"
            name = key.lstrip("-")
            if name not in columns:
                raise ValueError(f"Unknown column {name!r} for {table}")
            parts.append(f"{name} {direction}")
        return " ORDER BY " + ", ".join(parts) if parts else ""

    # ------------------------------------------------------------------
    # Entity operations
    # ------------------------------------------------------------------
    def find_by_id(
        self,
        table: str,
        entity_id: int,
        *,
        include_deleted: bool = False,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[Dict[str, Any]]:
        return self.find_one(table, {"id": entity_id}, include_deleted=include_deleted, conn=conn)

    def find_one(
        self,
        table: str,
        criteria: Mapping[str, Any],
        *,
        include_deleted: bool = False,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[Dict[str, Any]]:
        rows = self.find_many(
            table, criteria, order_by=("id",), include_deleted=include_deleted, conn=conn, limit=1
        )
        return rows[0] if rows else None

    def find_many(
        self,
        table: str,
        criteria: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Iterable[str] = ("id",),
        include_deleted: bool = False,
        conn: Optional[sqlite3.Connection] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return rows of ``table`` matching ``criteria`` (column equality).

        ``order_by`` entries are column names, prefixed with ``-`` for
        descending order.
        """
        if not all(fits_sqlite_int(value) for value in (criteria or {}).values()):
            return []
        where, params = self._where(table, criteria or {}, include_deleted)
        sql = f"SELECT {', '.join(self._columns(table))} FROM {table}{where}{self._order_by(table, order_by)}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return self._fetch(sql, params, conn)

    def insert(
        self,
        table: str,
        fields: Mapping[str, Any],
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Dict[str, Any]:
        """Insert a row and return it as stored."""
        if conn is None:
            with self.transaction() as own:
                return self.insert(table, fields, conn=own)
        columns = self._columns(table)
        values = dict(fields)
        now = to_db_timestamp(utc_now())
        values.setdefault("created_at", now)
        values.setdefault("updated_at", now)
        unknown = [key for key in values if key not in columns or key == "id"]
        if unknown:
            raise ValueError(f"Cannot insert columns {unknown} into {table}")
        placeholders = ", ".join("?" for _ in values)
        sql = f"INSERT INTO {table} ({', '.join(values)}) VALUES ({placeholders})"
        cursor = conn.execute(sql, tuple(values.values()))
        return self.find_by_id(table, cursor.lastrowid, include_deleted=True, conn=conn)

    def update(
        self,
        table: str,
        entity_id: int,
        fields: Mapping[str, Any],
        *,
        include_deleted: bool = False,
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        """Update one row in a single statement and return the affected row count.

        Soft-deleted rows are left untouched unless ``include_deleted``
        is set, so a concurrent soft-delete wins over a late update.
        """
        if not fits_sqlite_int(entity_id):
            return 0
        columns = self._columns(table)
        values = dict(fields)
        values["updated_at"] = to_db_timestamp(utc_now())
        unknown = [key for key in values if key not in columns or key == "id"]
        if unknown:
            raise ValueError(f"Cannot update columns {unknown} of {table}")
        assignments = ", ".join(f"{key} = ?" for key in values)
        where, params = self._where(table, {"id": entity_id}, include_deleted)
        sql = f"UPDATE {table} SET {assignments}{where}"
        return self._execute(sql, list(values.values()) + params, conn)

    def aggregate(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[Dict[str, Any]]:
        """Run a read-only aggregation query and return its rows."""
        return self._fetch(sql, params, conn)

    # ------------------------------------------------------------------
    # Attendee relation
    # ------------------------------------------------------------------
    def attendee_ids(self, event_id: int, *, conn: Optional[sqlite3.Connection] = None) -> List[int]:
        rows = self._fetch(
            "SELECT user_id FROM event_attendees WHERE event_id = ? ORDER BY registered_at, rowid",
            (event_id,),
            conn,
        )
        return [row["user_id"] for row in rows]

    def attendee_map(
        self, event_ids: Sequence[int], *, conn: Optional[sqlite3.Connection] = None
    ) -> Dict[int, List[int]]:
        """Return attendee ids for several events at once."""
        result: Dict[int, List[int]] = {event_id: [] for event_id in event_ids}
        if not event_ids:
            return result
        placeholders = ", ".join("?" for _ in event_ids)
        rows = self._fetch(
            f"SELECT event_id, user_id FROM event_attendees WHERE event_id IN ({placeholders}) "
            "ORDER BY registered_at, rowid",
            list(event_ids),
            conn,
        )
        for row in rows:
            result[row["event_id"]].append(row["user_id"])
        return result

    def attendee_profiles(
        self, event_ids: Sequence[int], *, conn: Optional[sqlite3.Connection] = None
    ) -> Dict[int, List[Dict[str, Any]]]:
        """Resolve attendee ids to ``id``, ``username`` and ``email`` per event."""
        result: Dict[int, List[Dict[str, Any]]] = {event_id: [] for event_id in event_ids}
        if not event_ids:
            return result
        placeholders = ", ".join("?" for _ in event_ids)
        rows = self._fetch(
            "SELECT a.event_id, u.id, u.username, u.email FROM event_attendees a "
            f"JOIN users u ON u.id = a.user_id WHERE a.event_id IN ({placeholders}) "
            "ORDER BY a.registered_at, a.rowid",
            list(event_ids),
            conn,
        )
        for row in rows:
            event_id = row.pop("event_id")
            result[event_id].append(row)
        return result

    def registered_event_ids(self, user_id: int, *, conn: Optional[sqlite3.Connection] = None) -> List[int]:
        """Ids of active events the user attends."""
        rows = self._fetch(
            "SELECT e.id FROM event_attendees a JOIN events e ON e.id = a.event_id "
            f"WHERE a.user_id = ? AND {self.active('e')} ORDER BY e.date, e.id",
            (user_id,),
            conn,
        )
        return [row["id"] for row in rows]

    def is_attendee(self, event_id: int, user_id: int, *, conn: Optional[sqlite3.Connection] = None) -> bool:
        rows = self._fetch(
            "SELECT 1 FROM event_attendees WHERE event_id = ? AND user_id = ?",
            (event_id, user_id),
            conn,
        )
        return bool(rows)

    def attendee_count(self, event_id: int, *, conn: Optional[sqlite3.Connection] = None) -> int:
        rows = self._fetch(
            "SELECT COUNT(*) AS total FROM event_attendees WHERE event_id = ?",
            (event_id,),
            conn,
        )
        return rows[0]["total"]

    def add_attendee_if_available(
        self, event_id: int, user_id: int, *, conn: Optional[sqlite3.Connection] = None
    ) -> bool:
        """Append ``user_id`` to the event only if it is active, not full and not already joined.

        The whole check is one conditional ``INSERT``; the return value
        tells whether a row was written.
        """
        written = self._execute(
            "INSERT INTO event_attendees (event_id, user_id, registered_at) "
            "SELECT e.id, ?, ? FROM events e "
            f"WHERE e.id = ? AND {self.active('e')} "
            "AND NOT EXISTS (SELECT 1 FROM event_attendees x WHERE x.event_id = e.id AND x.user_id = ?) "
            "AND (SELECT COUNT(*) FROM event_attendees c WHERE c.event_id = e.id) < e.capacity",
            (user_id, to_db_timestamp(utc_now()), event_id, user_id),
            conn,
        )
        return written == 1


def _split_statements(sql: str) -> List[str]:
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    return [statement.strip() for statement in "\n".join(lines).split(";") if statement.strip()]
