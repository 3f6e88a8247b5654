#!/usr/bin/env python3
"""
Label filtering utilities for GitHub issue analysis
Used by the GitHubIssues service before grouping or computing statistics
"""

from typing import Iterable, List, Optional, Sequence, Set, Tuple

from models import IssueRecord

EXCLUDE_MARKER = '!'


def split_label_filter(labels: Optional[Iterable[str]]) -> Tuple[Set[str], Set[str]]:
    """
    Separate requested labels into include and exclude sets.

    Args:
        labels: Requested labels, entries starting with '!' are exclusions

    Returns:
        (include, exclude) with the '!' marker stripped from exclusions
    """
    include: Set[str] = set()
    exclude: Set[str] = set()
    for label in labels or []:
        if label.startswith(EXCLUDE_MARKER):
            exclude.add(label[len(EXCLUDE_MARKER):])
        else:
            include.add(label)
    return include, exclude


def matches_labels(record: IssueRecord, include: Set[str], exclude: Set[str]) -> bool:
    """Record carries every include label and none of the exclude labels"""
    record_labels = set(record.labels)
    if include and not include.issubset(record_labels):
        return False
    if exclude and record_labels & exclude:
        return False
    return True


def filter_by_labels(records: Sequence[IssueRecord], labels: Optional[Sequence[str]] = None) -> List[IssueRecord]:
    """
    Apply an include/exclude label selection to a list of records.

    An empty selection returns the records unchanged.
    """
    if not labels:
        return list(records)

    include, exclude = split_label_filter(labels)
    return [record for record in records if matches_labels(record, include, exclude)]
