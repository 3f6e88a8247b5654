#!/usr/bin/env python3
"""
GitHub Issues API client

Fetches the issue summaries of a repository (optionally only those updated
since a timestamp), following pagination and dropping pull requests and drafts.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import requests

from config import GITHUB_API_URL, ISSUES_PER_PAGE
from models import IssueRecord
from utils_dates import format_issue_date, parse_issue_date

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class FetchError(Exception):
    """Remote fetch failed; nothing was written to the issue store"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RepositoryNotFoundError(FetchError):
    """The repository does not exist or is not visible with these credentials"""
    pass


class AccessForbiddenError(FetchError):
    """Credentials are missing or insufficient"""
    pass


def issue_from_api(issue: Dict[str, Any]) -> IssueRecord:
    """Convert a REST API issue into the stored summary"""
    return IssueRecord(
        number=int(issue['number']),
        created_at=parse_issue_date(issue['created_at']),
        closed_at=parse_issue_date(issue.get('closed_at')),
        state=issue.get('state', 'open'),
        labels=issue.get('labels', []),
        url=issue.get('html_url') or issue.get('url', ''),
    )


def is_pull_request(issue: Dict[str, Any]) -> bool:
    """Pull requests and drafts appear as issues in the GitHub API"""
    return bool(issue.get('pull_request')) or bool(issue.get('draft'))


class GitHubIssuesClient:
    """Fetch issue summaries from the GitHub REST API"""

    def __init__(self, credentials: Optional[Dict[str, Any]] = None, base_url: str = GITHUB_API_URL,
                 progress: Optional[ProgressCallback] = None):
        credentials = credentials or {}
        self.base_url = credentials.get('api_endpoint', base_url).rstrip('/')
        self.progress = progress
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github.v3+json'
        })
        token = credentials.get('access_token')
        if token:
            self.session.headers['Authorization'] = f'token {token}'

    def _report(self, message: str):
        logger.debug(message)
        if self.progress:
            self.progress(message)

    def _make_request(self, url: str, params: Optional[Dict] = None) -> Any:
        """Make GitHub API request, waiting out a primary rate limit once"""
        try:
            response = self.session.get(url, params=params)

            if response.status_code == 403 and 'rate limit' in response.text.lower():
                reset_time = int(response.headers.get('X-RateLimit-Reset', 0))
                sleep_time = max(reset_time - time.time(), 0) + 1
                self._report(f"Rate limited - waiting {int(sleep_time)}s before continuing")
                time.sleep(sleep_time)
                response = self.session.get(url, params=params)
        except requests.RequestException as e:
            raise FetchError(str(e)) from e

        self._raise_for_status(response, url)
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}", response.status_code) from e

    @staticmethod
    def _raise_for_status(response: requests.Response, url: str):
        status = response.status_code
        if status < 400:
            return
        if status == 404:
            raise RepositoryNotFoundError(f"Not found: {url}", status)
        if status in (401, 403):
            raise AccessForbiddenError(f"Access denied ({status}): {url}", status)
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(str(e), status) from e
        raise FetchError(f"Unexpected response ({status}): {url}", status)

    def check_repository(self, repository: str):
        """Raise RepositoryNotFoundError or AccessForbiddenError for unusable repositories"""
        self._make_request(f"{self.base_url}/repos/{repository}")

    def fetch_issues(self, repository: str, since: Optional[datetime] = None) -> List[IssueRecord]:
        """
        Fetch all issues of a repository using page-based pagination.

        Args:
            repository: 'owner/repo'
            since: only issues updated at or after this time

        Returns:
            Flat list of issue summaries, pull requests and drafts removed
        """
        url = f"{self.base_url}/repos/{repository}/issues"
        params = {
            'state': 'all',
            'sort': 'created',
            'direction': 'desc',
            'per_page': ISSUES_PER_PAGE,
        }
        if since:
            params['since'] = format_issue_date(since)

        issues: List[IssueRecord] = []
        page = 1
        while True:
            self._report(f"Fetching {repository} issues page {page}...")
            raw_batch = self._make_request(url, {**params, 'page': page})

            if not raw_batch:
                break

            issues.extend(issue_from_api(issue) for issue in raw_batch if not is_pull_request(issue))

            if len(raw_batch) < ISSUES_PER_PAGE:
                break
            page += 1

        self._report(f"Fetched {len(issues)} issues from {repository}")
        return issues
