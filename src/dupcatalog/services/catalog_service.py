"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/catalog_service.py
SQLite-backed catalog of (root, fingerprint, path, mtime) records.

Schema:
    roots  (id, root)                      unique on root
    files  (id, root_id, hash, path, mtime) indexed on root_id and hash

Files are append-only: re-scanning a tree adds new rows instead of updating old ones.
Paths are stored as the raw bytes of the file name, so names that are not valid
UTF-8 survive the round trip.
"""
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from dupcatalog.core.errors import CatalogError
from dupcatalog.core.interfaces import CatalogRecorder
from dupcatalog.core.models import CatalogEntry, Root
from dupcatalog.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)


class SQLiteCatalog(CatalogRecorder):
    """
    Catalog store on a single SQLite file.

    Usage:
        with SQLiteCatalog("~/.dupcatalog-catalog") as catalog:
            root_id = catalog.ensure_root("/data")
            catalog.record_entry(root_id, fingerprint, "/data/a.txt", mtime)

    Pending inserts are committed every `commit_interval` records and when the
    catalog is closed, including when the with-block exits on an exception.
    """

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS roots (
        id INTEGER NOT NULL PRIMARY KEY,
        root TEXT
    );
    CREATE TABLE IF NOT EXISTS files (
        id INTEGER NOT NULL PRIMARY KEY,
        root_id INTEGER,
        hash TEXT,
        path TEXT,
        mtime DATETIME
    );
    CREATE UNIQUE INDEX IF NOT EXISTS unique_root_idx ON roots (root);
    CREATE INDEX IF NOT EXISTS root_idx ON files (root_id);
    CREATE INDEX IF NOT EXISTS hash_idx ON files (hash);
    """

    def __init__(self, db_path: str, commit_interval: int = 500):
        self.db_path = db_path
        self.commit_interval = commit_interval
        self._pending = 0
        self._root_ids: Dict[str, int] = {}
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.text_factory = self._decode_text
            self._conn.executescript(self.SCHEMA)
        except sqlite3.Error as e:
            raise CatalogError(f"Cannot open catalog: {e}", path=db_path) from e
        logger.debug(f"Opened catalog {db_path}")

    def ensure_root(self, path: str) -> int:
        """Get-or-create the identifier of a root path. Memoized and thread-safe."""
        with self._lock:
            if path in self._root_ids:
                return self._root_ids[path]

            try:
                row = self._conn.execute(
                    "SELECT id FROM roots WHERE root = CAST(? AS TEXT)", (self._encode_path(path),)
                ).fetchone()
                if row is not None:
                    root_id = row[0]
                else:
                    cursor = self._conn.execute(
                        "INSERT INTO roots (root) VALUES (CAST(? AS TEXT))", (self._encode_path(path),)
                    )
                    self._conn.commit()
                    root_id = cursor.lastrowid
                    logger.debug(f"Registered root {path} as {root_id}")
            except sqlite3.Error as e:
                raise CatalogError(f"Cannot register root: {e}", path=path) from e

            self._root_ids[path] = root_id
            return root_id

    def record_entry(self, root_id: int, fingerprint: int, path: str, mtime: datetime) -> int:
        """Appends a file record and returns its row id."""
        with self._lock:
            try:
                cursor = self._conn.execute(
                    "INSERT INTO files (root_id, hash, path, mtime) VALUES (?, ?, CAST(? AS TEXT), ?)",
                    (
                        root_id,
                        ConvertUtils.fingerprint_to_hex(fingerprint),
                        self._encode_path(path),
                        self._format_mtime(mtime),
                    )
                )
            except sqlite3.Error as e:
                raise CatalogError(f"Cannot record entry: {e}", path=path) from e

            self._pending += 1
            if self._pending >= self.commit_interval:
                self._commit()
            return cursor.lastrowid

    def get_root_id(self, path: str) -> Optional[int]:
        row = self._conn.execute(
            "SELECT id FROM roots WHERE root = CAST(? AS TEXT)", (self._encode_path(path),)
        ).fetchone()
        return row[0] if row else None

    def get_roots(self) -> List[Root]:
        rows = self._conn.execute("SELECT id, root FROM roots ORDER BY id").fetchall()
        return [Root(id=row[0], path=row[1]) for row in rows]

    def get_entries(self, root_id: Optional[int] = None) -> List[CatalogEntry]:
        """Returns recorded entries in insertion order, optionally for one root."""
        query = "SELECT root_id, hash, path, mtime FROM files"
        params = ()
        if root_id is not None:
            query += " WHERE root_id = ?"
            params = (root_id,)
        query += " ORDER BY id"

        return [
            CatalogEntry(
                root_id=row[0],
                fingerprint=ConvertUtils.hex_to_fingerprint(row[1]),
                path=row[2],
                mtime=datetime.fromisoformat(row[3]),
            )
            for row in self._conn.execute(query, params)
        ]

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._commit()
            finally:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> 'SQLiteCatalog':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _commit(self) -> None:
        try:
            self._conn.commit()
        except sqlite3.Error as e:
            raise CatalogError(f"Cannot commit catalog: {e}", path=self.db_path) from e
        self._pending = 0

    @staticmethod
    def _encode_path(path: str) -> bytes:
        return path.encode("utf-8", "surrogateescape")

    @staticmethod
    def _decode_text(raw: bytes) -> str:
        return raw.decode("utf-8", "surrogateescape")

    @staticmethod
    def _format_mtime(mtime: datetime) -> str:
        if mtime.tzinfo is None:
            mtime = mtime.replace(tzinfo=timezone.utc)
        return mtime.astimezone(timezone.utc).isoformat(sep=" ")
