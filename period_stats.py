#!/usr/bin/env python3
"""
Issue lifecycle statistics per calendar period

Groups issues by year or month into created, closed, finished (created and
closed in the same period) and open (created in the period but not finished
in it) lists, and computes closed/created ratios and closing times.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from models import IssueRecord
from utils_dates import period_of


@dataclass
class PeriodBucket:
    """Issues and statistics attributed to one year or month"""
    period: int
    created: List[IssueRecord] = field(default_factory=list)
    closed: List[IssueRecord] = field(default_factory=list)
    finished: List[IssueRecord] = field(default_factory=list)
    open: List[IssueRecord] = field(default_factory=list)
    stats: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'created': [issue.to_dict() for issue in self.created],
            'closed': [issue.to_dict() for issue in self.closed],
            'finished': [issue.to_dict() for issue in self.finished],
            'open': [issue.to_dict() for issue in self.open],
        }
        if self.stats is not None:
            data['stats'] = self.stats
        return data


# ============================================================================
# STATISTICS
# ============================================================================

def closed_created_ratio(closed: Sequence[IssueRecord], created: Sequence[IssueRecord]) -> float:
    """|closed| / |created|, 0 when either side is empty"""
    if not created or not closed:
        return 0
    return len(closed) / len(created)


def _closing_times(closed: Sequence[IssueRecord]) -> List[float]:
    return [issue.closing_time for issue in closed if issue.closing_time is not None]


def average_closing_time(closed: Sequence[IssueRecord]) -> float:
    """Mean seconds from creation to closing, 0 for no issues"""
    times = _closing_times(closed)
    if not times:
        return 0
    return sum(times) / len(times)


def median_closing_time(closed: Sequence[IssueRecord]) -> float:
    """Median seconds from creation to closing, 0 for no issues"""
    times = sorted(_closing_times(closed))
    if not times:
        return 0
    size = len(times)
    return (times[(size - 1) // 2] + times[size // 2]) / 2


def combined_stats(bucket: PeriodBucket) -> Dict[str, Any]:
    """Ratio and closing time statistics of one bucket"""
    return {
        'ratio': {
            'all': closed_created_ratio(bucket.closed, bucket.created),
            'finished': closed_created_ratio(bucket.finished, bucket.created),
        },
        'close_time': {
            'all': {
                'average': average_closing_time(bucket.closed),
                'median': median_closing_time(bucket.closed),
            },
            'finished': {
                'average': average_closing_time(bucket.finished),
                'median': median_closing_time(bucket.finished),
            },
        },
    }


# ============================================================================
# GROUPING
# ============================================================================

def _group(issues: Sequence[IssueRecord], key: Callable[[IssueRecord], int]) -> Dict[int, List[IssueRecord]]:
    groups: Dict[int, List[IssueRecord]] = defaultdict(list)
    for issue in issues:
        groups[key(issue)].append(issue)
    return groups


def is_finished(issue: IssueRecord, period: str) -> bool:
    """Created and closed within the same period"""
    return issue.is_closed and period_of(issue.created_at, period) == period_of(issue.closed_at, period)


def group_by_period(issues: Sequence[IssueRecord], period: str = 'year',
                    stats: bool = True) -> Optional[Dict[int, PeriodBucket]]:
    """
    Group issues into calendar period buckets, most recent period first.

    For period='month' the caller restricts the issues to a single year first,
    since month numbers repeat across years.

    Args:
        issues: issues to group (already label-filtered)
        period: 'year' or 'month'
        stats: compute the stats block of every bucket

    Returns:
        Ordered mapping of period to bucket, or None when there are no issues
    """
    if not issues:
        return None

    created = _group(issues, lambda issue: period_of(issue.created_at, period))
    closed = _group([issue for issue in issues if issue.closed_at is not None],
                    lambda issue: period_of(issue.closed_at, period))
    finished_issues = [issue for issue in issues if is_finished(issue, period)]
    finished = _group(finished_issues, lambda issue: period_of(issue.created_at, period))
    open_ = _group([issue for issue in issues if not is_finished(issue, period)],
                   lambda issue: period_of(issue.created_at, period))

    keys = sorted(set(created) | set(closed) | set(finished) | set(open_), reverse=True)

    buckets: Dict[int, PeriodBucket] = {}
    for key in keys:
        bucket = PeriodBucket(
            period=key,
            created=created.get(key, []),
            closed=closed.get(key, []),
            finished=finished.get(key, []),
            open=open_.get(key, []),
        )
        if stats:
            bucket.stats = combined_stats(bucket)
        buckets[key] = bucket
    return buckets
