#!/usr/bin/env python3
"""
GitHub Issues lifecycle service

Keeps a locally cached copy of a repository's issues and answers lifecycle
questions about them, such as closing times or per-year and per-month
created/closed statistics, optionally filtered by labels.

    with GitHubIssues('octodog/bark', IssuesSettings()) as issues:
        per_year = issues.per_year(labels=['bug', '!wontfix'])
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from config import DATABASE_NAME, IssuesSettings
from github_client import GitHubIssuesClient
from issue_store import IssueStore
from models import IssueRecord
from period_stats import PeriodBucket, average_closing_time, group_by_period, median_closing_time
from sync_issues import Clock, IssueSyncPolicy
from utils_filtering import filter_by_labels

logger = logging.getLogger(__name__)


class GitHubIssues:
    """Read API over the cached issues of one repository"""

    def __init__(self, repository: str, settings: Optional[IssuesSettings] = None, client=None,
                 clock: Optional[Clock] = None):
        self.repository = repository
        self.settings = settings or IssuesSettings()
        self.client = client or GitHubIssuesClient(self.settings.credentials)

        self.cache = self.settings.cache_dir / repository
        self.cache.mkdir(parents=True, exist_ok=True)
        self.database_path: Path = self.cache / DATABASE_NAME

        if not self.database_path.exists():
            # fail before creating an empty database for a mistyped repository
            self.client.check_repository(repository)

        logger.debug("Opening issue store %s", self.database_path)
        self.store = IssueStore(self.database_path)
        self.sync = IssueSyncPolicy(self.store, self.client, repository, self.settings.refresh_seconds,
                                    clock=clock)

    def __enter__(self) -> 'GitHubIssues':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.store.close()

    def _load(self, labels: Optional[Sequence[str]] = None) -> List[IssueRecord]:
        self.sync.ensure_fresh()
        return filter_by_labels(self.store.all_records(), labels)

    def labels(self) -> List[str]:
        """All labels used in the repository, reverse sorted"""
        self.sync.ensure_fresh()
        return sorted(self.store.all_labels(), reverse=True)

    def all_issues(self) -> List[IssueRecord]:
        return self._load()

    def filtered_by_labels(self, labels: Sequence[str]) -> List[IssueRecord]:
        """Issues having all plain labels and none of the '!'-prefixed ones"""
        return self._load(labels)

    def all_average_closing_time(self) -> float:
        return self.average_closing_time_filtered_by_labels([])

    def average_closing_time_filtered_by_labels(self, labels: Sequence[str]) -> float:
        """Average closing time in seconds of the closed issues matching labels"""
        issues = self._load(labels)
        return average_closing_time([issue for issue in issues if issue.is_closed])

    def all_median_closing_time(self) -> float:
        return self.median_closing_time_filtered_by_labels([])

    def median_closing_time_filtered_by_labels(self, labels: Sequence[str]) -> float:
        """Median closing time in seconds of the closed issues matching labels"""
        issues = self._load(labels)
        return median_closing_time([issue for issue in issues if issue.is_closed])

    def per_year(self, labels: Optional[Sequence[str]] = None, stats: bool = True) -> Optional[Dict[int, PeriodBucket]]:
        """
        Issues grouped per year, most recent first.

        Returns None when no issue matches the labels.
        """
        issues = self._load(labels)
        return group_by_period(issues, period='year', stats=stats)

    def per_month(self, year: int, labels: Optional[Sequence[str]] = None,
                  stats: bool = True) -> Optional[Dict[int, PeriodBucket]]:
        """
        Issues created in the given year grouped per month, most recent first.

        Returns None when no issue matches the labels in that year.
        """
        issues = [issue for issue in self._load(labels) if issue.created_at.year == year]
        return group_by_period(issues, period='month', stats=stats)
