#!/usr/bin/env python3
"""
GitHub Issues Sync Policy

Decides when the local issue store is stale and refreshes it from GitHub:
a full fetch on first run, an incremental fetch bounded by the last fetch
time afterwards. Fetch and store errors propagate unchanged.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from issue_store import IssueStore
from models import IssueRecord
from utils_dates import format_issue_date, utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class IssueSyncPolicy:
    """Read-through refresh of an IssueStore from an issue fetcher"""

    def __init__(self, store: IssueStore, client, repository: str, refresh_seconds: float,
                 clock: Optional[Clock] = None):
        self.store = store
        self.client = client
        self.repository = repository
        self.refresh_seconds = refresh_seconds
        self.clock = clock or utc_now

    def is_stale(self) -> bool:
        """Stale when the store is empty or its last fetch is older than the refresh interval"""
        if self.store.needs_update(self.refresh_seconds, now=self.clock()):
            return True
        return self.store.count() == 0

    def ensure_fresh(self) -> bool:
        """
        Refresh the store if it is stale.

        Returns:
            True when a fetch was performed
        """
        if not self.is_stale():
            logger.debug("Issue store for %s is fresh", self.repository)
            return False
        self.refresh()
        return True

    def refresh(self) -> List[IssueRecord]:
        """Fetch from GitHub and merge into the store, returning the fetched records"""
        last_fetch = self.store.last_fetch()
        # captured before fetching so issues created meanwhile are picked up next time
        fetched_at = self.clock()

        if last_fetch is None:
            logger.debug("Full fetch of %s", self.repository)
            issues = self.client.fetch_issues(self.repository)
            self.store.upsert(issues, fetched_at)
            logger.info("Stored %d issues for %s", len(issues), self.repository)
            return issues

        logger.debug("Incremental fetch of %s since %s", self.repository, format_issue_date(last_fetch))
        issues = self.client.fetch_issues(self.repository, since=last_fetch)
        if not issues:
            # last_fetch is not advanced on an empty incremental response
            logger.debug("No issues updated since %s", format_issue_date(last_fetch))
            return issues

        self.store.upsert(issues, fetched_at)
        logger.info("Updated %d issues for %s", len(issues), self.repository)
        return issues
