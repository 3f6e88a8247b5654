#!/usr/bin/env python3
"""
Shared display utilities for GitHub issue statistics
Used by report_generator.py and issue_stats.py
"""

from typing import Any, Dict, List, Optional, Sequence

SECONDS_PER_DAY = 24 * 60 * 60


def seconds_to_days(seconds: float) -> int:
    """Convert a closing time in seconds to whole days"""
    return round(seconds / SECONDS_PER_DAY)


def format_labels_for_display(labels: Optional[Sequence[str]], separator: str = ', ') -> str:
    """
    Format labels for display in reports and UI.

    Args:
        labels: label names
        separator: String to join labels with (default: ', ')

    Returns:
        Formatted string of label names joined by separator
    """
    if not labels:
        return ""
    return separator.join(str(label) for label in labels)


def stats_as_days(stats: Dict[str, Any]) -> Dict[str, int]:
    """Closing time statistics of a bucket converted to days"""
    close_time = stats['close_time']
    return {
        'all_avg': seconds_to_days(close_time['all']['average']),
        'all_median': seconds_to_days(close_time['all']['median']),
        'finished_avg': seconds_to_days(close_time['finished']['average']),
        'finished_median': seconds_to_days(close_time['finished']['median']),
    }


def chunk_rows(items: Sequence[str], columns: int) -> List[List[str]]:
    """Lay out items in rows of fixed width, padding the last row with blanks"""
    rows = []
    for start in range(0, len(items), columns):
        row = list(items[start:start + columns])
        row.extend([''] * (columns - len(row)))
        rows.append(row)
    return rows
