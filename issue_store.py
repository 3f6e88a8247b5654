#!/usr/bin/env python3
"""
SQLite issue store

Keeps the minimal issue summaries needed for lifecycle statistics together with
a small metadata table that remembers when the repository was last fetched.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Set, Union

from models import IssueRecord
from utils_dates import format_issue_date, parse_issue_date, utc_now

logger = logging.getLogger(__name__)

LAST_FETCH_KEY = 'last_fetch'

SCHEMA = """
CREATE TABLE IF NOT EXISTS issues (
    id INTEGER PRIMARY KEY,
    created_at TEXT NOT NULL,
    closed_at TEXT,
    number INTEGER UNIQUE NOT NULL,
    url TEXT NOT NULL,
    labels TEXT,
    state TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

UPSERT_ISSUE = """
INSERT INTO issues (created_at, closed_at, number, url, labels, state)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT(number) DO UPDATE SET
    created_at = excluded.created_at,
    closed_at = excluded.closed_at,
    url = excluded.url,
    labels = excluded.labels,
    state = excluded.state
"""


class StoreError(Exception):
    """Persistence failure; the in-flight transaction has been rolled back"""
    pass


class IssueStore:
    """Durable issue storage keyed by issue number"""

    def __init__(self, path: Union[str, Path], timeout: float = 5.0):
        self.path = Path(path)
        try:
            self._conn = sqlite3.connect(str(self.path), timeout=timeout)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to open issue store '{self.path}': {e}") from e

        try:
            self._conn.row_factory = sqlite3.Row
            # locks taken by this connection are kept until close()
            self._conn.execute('PRAGMA locking_mode=EXCLUSIVE')
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.close()
            raise StoreError(f"Issue store '{self.path}' is unavailable: {e}") from e
        self._closed = False

    def __enter__(self) -> 'IssueStore':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Release the database handle; safe to call more than once"""
        if not self._closed:
            self._conn.close()
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------ Writes ------------------
    def upsert(self, records: Sequence[IssueRecord], fetched_at: datetime):
        """
        Insert or update records by issue number and record the fetch time.

        The whole batch and the last_fetch update commit together or not at all.
        """
        rows = [
            (
                format_issue_date(record.created_at),
                format_issue_date(record.closed_at),
                record.number,
                record.url or '',
                json.dumps(list(record.labels)),
                record.state,
            )
            for record in records
        ]
        try:
            with self._conn:
                self._conn.executemany(UPSERT_ISSUE, rows)
                self._conn.execute(
                    'INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)',
                    (LAST_FETCH_KEY, format_issue_date(fetched_at)),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to store {len(rows)} issues: {e}") from e
        logger.debug("Stored %d issues, last fetch %s", len(rows), format_issue_date(fetched_at))

    # ------------------ Reads ------------------
    def all_records(self) -> List[IssueRecord]:
        """Every stored issue, newest first"""
        rows = self._query('SELECT * FROM issues ORDER BY created_at DESC, number DESC')
        return [self._row_to_record(row) for row in rows]

    def all_labels(self) -> Set[str]:
        labels: Set[str] = set()
        for row in self._query('SELECT labels FROM issues'):
            labels.update(json.loads(row['labels'] or '[]'))
        return labels

    def count(self) -> int:
        return self._query('SELECT COUNT(*) FROM issues')[0][0]

    def metadata(self, key: str) -> Optional[str]:
        rows = self._query('SELECT value FROM metadata WHERE key = ?', (key,))
        if not rows:
            return None
        return rows[0]['value']

    def last_fetch(self) -> Optional[datetime]:
        """Timestamp of the last successful merge, None before the first sync"""
        return parse_issue_date(self.metadata(LAST_FETCH_KEY))

    def needs_update(self, max_age_seconds: float, now: Optional[datetime] = None) -> bool:
        """True when never fetched or the last fetch is at least max_age_seconds old"""
        last_fetch = self.last_fetch()
        if last_fetch is None:
            return True
        now = now or utc_now()
        return (now - last_fetch).total_seconds() >= max_age_seconds

    def _query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Issue store query failed: {e}") from e

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> IssueRecord:
        return IssueRecord(
            id=row['id'],
            number=row['number'],
            created_at=parse_issue_date(row['created_at']),
            closed_at=parse_issue_date(row['closed_at']),
            state=row['state'],
            labels=json.loads(row['labels'] or '[]'),
            url=row['url'],
        )
