#!/usr/bin/env python3
"""
Issue record model shared by the store, the sync policy and the aggregator
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from utils_dates import format_issue_date


@dataclass
class IssueRecord:
    """Minimal issue summary needed for lifecycle statistics"""
    number: int
    created_at: datetime
    closed_at: Optional[datetime]
    state: str  # 'open' or 'closed'
    labels: List[str] = field(default_factory=list)
    url: str = ''
    id: Optional[int] = None  # assigned by the issue store

    def __post_init__(self):
        self.labels = normalize_label_names(self.labels)

    @property
    def is_closed(self) -> bool:
        return self.state == 'closed' and self.closed_at is not None

    @property
    def closing_time(self) -> Optional[float]:
        """Seconds between creation and closing, None while open"""
        if self.closed_at is None:
            return None
        return (self.closed_at - self.created_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'number': self.number,
            'created_at': format_issue_date(self.created_at),
            'closed_at': format_issue_date(self.closed_at),
            'state': self.state,
            'labels': list(self.labels),
            'url': self.url,
        }


def normalize_label_names(raw_labels: Optional[Iterable[Any]]) -> List[str]:
    """
    Normalize labels from REST format (list of dicts with 'name') or plain
    strings to a sorted list of unique names.
    """
    if not raw_labels:
        return []
    names = set()
    for label in raw_labels:
        if isinstance(label, dict):
            name = label.get('name')
        else:
            name = label
        if name:
            names.add(str(name))
    return sorted(names)
