#!/usr/bin/env python3
"""
Unit tests for issue_store.py - SQLite persistence of issue summaries
"""
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "pytest",
# ]
# ///

import os
import shutil
import sqlite3
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from issue_store import IssueStore, StoreError
from models import IssueRecord
from issue_fixtures import ONE_DAY, START, load_issue_records, reopened


class TestIssueStore(unittest.TestCase):
    """Test IssueStore writes, reads and metadata"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.store = IssueStore(Path(self.temp_dir) / 'issues.db')
        self.records = load_issue_records()

    def tearDown(self):
        self.store.close()
        shutil.rmtree(self.temp_dir)

    def test_new_store_is_empty(self):
        self.assertEqual(self.store.count(), 0)
        self.assertEqual(self.store.all_records(), [])
        self.assertEqual(self.store.all_labels(), set())
        self.assertIsNone(self.store.last_fetch())

    def test_upsert_inserts_and_records_fetch_time(self):
        self.store.upsert(self.records, START)

        self.assertEqual(self.store.count(), 4)
        self.assertEqual(self.store.last_fetch(), START)
        self.assertEqual(self.store.metadata('last_fetch'), '2024-06-01T12:00:00Z')

    def test_records_newest_first(self):
        self.store.upsert(list(reversed(self.records)), START)
        self.assertEqual([record.number for record in self.store.all_records()], [5120, 2001, 4711, 1347])

    def test_records_round_trip_fields(self):
        self.store.upsert(self.records, START)
        stored = {record.number: record for record in self.store.all_records()}

        issue = stored[2001]
        self.assertIsNotNone(issue.id)
        self.assertEqual(issue.created_at, datetime(2011, 8, 2, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(issue.closed_at, datetime(2011, 9, 14, 16, 30, tzinfo=timezone.utc))
        self.assertEqual(issue.state, 'closed')
        self.assertEqual(issue.labels, ['bug', 'help wanted'])
        self.assertEqual(issue.url, 'https://github.com/octodog/bark/issues/2001')

    def test_upsert_is_idempotent(self):
        self.store.upsert(self.records, START)
        first = self.store.all_records()

        self.store.upsert(self.records, START)
        self.assertEqual(self.store.count(), 4)
        self.assertEqual(self.store.all_records(), first)

    def test_update_keeps_identifier(self):
        self.store.upsert(reopened(self.records, 5120), START)
        before = {record.number: record for record in self.store.all_records()}
        self.assertEqual(before[5120].state, 'open')
        self.assertIsNone(before[5120].closed_at)

        later = START + timedelta(seconds=ONE_DAY)
        closed = [record for record in self.records if record.number == 5120]
        self.store.upsert(closed, later)

        after = {record.number: record for record in self.store.all_records()}
        self.assertEqual(self.store.count(), 4)
        self.assertEqual(after[5120].id, before[5120].id)
        self.assertEqual(after[5120].state, 'closed')
        self.assertEqual(after[5120].closed_at, datetime(2012, 6, 20, 12, 0, tzinfo=timezone.utc))
        self.assertEqual(after[2001], before[2001])
        self.assertEqual(self.store.last_fetch(), later)

    def test_empty_upsert_still_records_fetch_time(self):
        self.store.upsert([], START)
        self.assertEqual(self.store.count(), 0)
        self.assertEqual(self.store.last_fetch(), START)

    def test_all_labels(self):
        self.store.upsert(self.records, START)
        self.assertEqual(self.store.all_labels(), {'bug', 'help wanted', 'enhancement'})

    def test_failed_batch_rolls_back(self):
        self.store.upsert(self.records, START)
        broken = IssueRecord(number=9999, created_at=START, closed_at=None, state=None)
        later = START + timedelta(seconds=ONE_DAY)

        with self.assertRaises(StoreError):
            self.store.upsert(reopened(self.records, 2001) + [broken], later)

        self.assertEqual(self.store.count(), 4)
        self.assertEqual(self.store.last_fetch(), START)
        stored = {record.number: record for record in self.store.all_records()}
        self.assertEqual(stored[2001].state, 'closed')

    def test_needs_update(self):
        self.assertTrue(self.store.needs_update(ONE_DAY, now=START))

        self.store.upsert(self.records, START)
        self.assertFalse(self.store.needs_update(ONE_DAY, now=START + timedelta(hours=23)))
        self.assertTrue(self.store.needs_update(ONE_DAY, now=START + timedelta(seconds=ONE_DAY)))
        self.assertTrue(self.store.needs_update(0, now=START))

    def test_data_survives_reopen(self):
        self.store.upsert(self.records, START)
        self.store.close()

        with IssueStore(Path(self.temp_dir) / 'issues.db') as reopened_store:
            self.assertEqual(reopened_store.count(), 4)
            self.assertEqual(reopened_store.last_fetch(), START)

    def test_open_store_is_held_exclusively(self):
        self.store.upsert(self.records, START)

        with self.assertRaises(StoreError) as context:
            IssueStore(Path(self.temp_dir) / 'issues.db', timeout=0.1)
        self.assertIn('locked', str(context.exception))

        self.store.close()
        with IssueStore(Path(self.temp_dir) / 'issues.db', timeout=0.1) as second:
            self.assertEqual(second.count(), 4)

    def test_other_connection_cannot_write_while_open(self):
        self.store.upsert(self.records, START)

        conn = sqlite3.connect(str(Path(self.temp_dir) / 'issues.db'), timeout=0.1)
        try:
            with self.assertRaises(sqlite3.OperationalError):
                conn.execute("DELETE FROM issues")
        finally:
            conn.close()
        self.assertEqual(self.store.count(), 4)

    def test_close_is_idempotent(self):
        self.store.close()
        self.store.close()
        self.assertTrue(self.store.closed)

    def test_closed_store_raises_store_error(self):
        self.store.close()
        with self.assertRaises(StoreError):
            self.store.count()
        with self.assertRaises(StoreError):
            self.store.upsert(self.records, START)

    def test_unopenable_path_raises_store_error(self):
        with self.assertRaises(StoreError):
            IssueStore(Path(self.temp_dir) / 'missing' / 'dir' / 'issues.db')

    def test_schema(self):
        self.store.close()
        conn = sqlite3.connect(str(Path(self.temp_dir) / 'issues.db'))
        try:
            columns = {row[1] for row in conn.execute('PRAGMA table_info(issues)')}
            tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        finally:
            conn.close()
        self.assertEqual(columns, {'id', 'created_at', 'closed_at', 'number', 'url', 'labels', 'state'})
        self.assertIn('metadata', tables)


if __name__ == '__main__':
    unittest.main()
