#!/usr/bin/env python3
"""
Shared test doubles: fixture loading, a fake GitHub client and a settable clock
"""

import copy
import json
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from github_client import issue_from_api, is_pull_request

FIXTURES_DIR = Path(__file__).parent / 'fixtures'

START = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
ONE_DAY = 24 * 60 * 60


def load_raw_issues(name='issues.json'):
    with open(FIXTURES_DIR / name, encoding='utf-8') as f:
        return json.load(f)


def load_issue_records(name='issues.json'):
    """Fixture issues as the GitHub client would return them"""
    return [issue_from_api(issue) for issue in load_raw_issues(name) if not is_pull_request(issue)]


def reopened(records, number):
    """Copy of records with the given issue still open"""
    records = copy.deepcopy(records)
    for record in records:
        if record.number == number:
            record.state = 'open'
            record.closed_at = None
    return records


class FakeClock:
    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class FakeClient:
    """Stands in for GitHubIssuesClient, replaying queued responses"""

    def __init__(self, responses=None, clock=None, fetch_duration=0):
        self.responses = list(responses or [])
        self.calls = []
        self.repository_checks = []
        self.check_error = None
        self.fetch_error = None
        self.clock = clock
        self.fetch_duration = fetch_duration

    def check_repository(self, repository):
        self.repository_checks.append(repository)
        if self.check_error:
            raise self.check_error

    def fetch_issues(self, repository, since=None):
        self.calls.append((repository, since))
        if self.clock and self.fetch_duration:
            self.clock.advance(self.fetch_duration)
        if self.fetch_error:
            raise self.fetch_error
        if not self.responses:
            return []
        return copy.deepcopy(self.responses.pop(0))
