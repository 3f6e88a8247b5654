#!/usr/bin/env python3
"""
Shared date utilities for GitHub issue lifecycle statistics
Used by the issue store, the sync policy and the period aggregator
"""

from datetime import datetime, timezone
from typing import Optional, Union

PERIODS = ('year', 'month')


def parse_issue_date(date_str: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse ISO format date string from GitHub API or the issue store.

    Args:
        date_str: ISO format date string like "2025-09-18T15:25:13Z"

    Returns:
        timezone-aware UTC datetime, or None when no value was given
    """
    if date_str is None or date_str == '':
        return None
    if isinstance(date_str, str):
        parsed = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
    else:
        parsed = date_str
    return to_utc(parsed)


def format_issue_date(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime the way GitHub does: 2025-09-18T15:25:13Z"""
    if value is None:
        return None
    return to_utc(value).strftime('%Y-%m-%dT%H:%M:%SZ')


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def period_of(value: datetime, period: str = 'year') -> int:
    """
    Calendar period number of a timestamp.

    Args:
        value: timestamp to classify
        period: 'year' (e.g. 2024) or 'month' (1-12)

    Returns:
        Integer period key
    """
    if period not in PERIODS:
        raise ValueError(f"Invalid period: {period!r} (expected 'year' or 'month')")
    return getattr(to_utc(value), period)
