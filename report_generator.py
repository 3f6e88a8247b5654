#!/usr/bin/env python3
"""
Report Generation Module for GitHub Issue Statistics
Handles period tables, legends, and JSON, CSV and chart exports
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import matplotlib.pyplot as plt
import pandas as pd
from rich.table import Table
from rich import box
from rich.text import Text

from period_stats import PeriodBucket
from utils import chunk_rows, seconds_to_days, stats_as_days

BASE_COLUMNS = ['Created', 'Closed', 'Created-Closed-Ratio', 'Closed-Avg', 'Closed-Median']
FINISHED_COLUMNS = ['Finished', 'Finished-Ratio', 'Finished-Avg', 'Finished-Median']


class ReportGenerator:
    """Renders per-period issue statistics"""

    def __init__(self, period_name: str = 'Year', finished: bool = False):
        self.period_name = period_name
        self.finished = finished

    def header(self) -> List[str]:
        header = [self.period_name] + BASE_COLUMNS
        if self.finished:
            header += FINISHED_COLUMNS
        return header

    def row(self, bucket: PeriodBucket) -> List[Any]:
        """One table row: counts, ratios and closing times in days"""
        stats = bucket.stats
        days = stats_as_days(stats)
        row = [
            bucket.period,
            len(bucket.created),
            len(bucket.closed),
            round(stats['ratio']['all'], 2),
            days['all_avg'],
            days['all_median'],
        ]
        if self.finished:
            row += [
                len(bucket.finished),
                round(stats['ratio']['finished'], 2),
                days['finished_avg'],
                days['finished_median'],
            ]
        return row

    def rows(self, buckets: Dict[int, PeriodBucket]) -> List[List[Any]]:
        return [self.row(bucket) for bucket in buckets.values()]

    def table(self, buckets: Dict[int, PeriodBucket]) -> Table:
        table = Table(box=box.SIMPLE_HEAD)
        for column in self.header():
            table.add_column(column, justify='right')
        for row in self.rows(buckets):
            table.add_row(*[str(value) for value in row])
        return table

    def legend(self, buckets: Dict[int, PeriodBucket], extra: Optional[str] = None) -> str:
        """Totals line, e.g. '12 created. 9 closed. 3 open.'"""
        created = sum(len(bucket.created) for bucket in buckets.values())
        closed = sum(len(bucket.closed) for bucket in buckets.values())
        # issues still open overall, not the per-period open bucket
        still_open = created - closed

        legend = f"{created} created. {closed} closed. {still_open} open."
        if extra:
            legend = f"{legend}\n{extra}"
        return legend

    def to_json(self, buckets: Dict[int, PeriodBucket]) -> str:
        return json.dumps({str(period): bucket.to_dict() for period, bucket in buckets.items()}, indent=2)

    def to_dataframe(self, buckets: Dict[int, PeriodBucket]) -> pd.DataFrame:
        return pd.DataFrame(self.rows(buckets), columns=self.header())

    def write_csv(self, buckets: Dict[int, PeriodBucket], output_file: Union[str, Path]) -> Path:
        output_path = Path(output_file)
        self.to_dataframe(buckets).to_csv(output_path, index=False)
        return output_path

    def write_chart(self, buckets: Dict[int, PeriodBucket], output_file: Union[str, Path]) -> Path:
        """Created, closed and closed/created ratio bar charts in one PNG"""
        plt.switch_backend('Agg')
        periods = [str(period) for period in buckets]
        created = [len(bucket.created) for bucket in buckets.values()]
        closed = [len(bucket.closed) for bucket in buckets.values()]
        ratios = [round(bucket.stats['ratio']['all'], 2) if bucket.stats else 0 for bucket in buckets.values()]

        fig, axes = plt.subplots(3, 1, figsize=(12, 12))
        for ax, values, title, color in (
            (axes[0], created, 'Created', 'tab:red'),
            (axes[1], closed, 'Closed', 'tab:green'),
            (axes[2], ratios, 'Created/Closed Ratio', 'tab:blue'),
        ):
            ax.barh(periods, values, color=color)
            ax.invert_yaxis()
            ax.set_title(title, fontweight='bold')
            ax.set_ylabel(self.period_name)
            for index, value in enumerate(values):
                ax.text(value, index, f" {value}", va='center')

        output_path = Path(output_file)
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return output_path


def labels_table(labels: List[str], columns: int) -> Table:
    """Borderless table laying out labels several per row"""
    table = Table(show_header=False, box=None, pad_edge=False)
    for _ in range(columns):
        table.add_column()
    for row in chunk_rows(labels, columns):
        table.add_row(*[Text(item) for item in row])
    return table


def closing_time_summary(average_seconds: float, median_seconds: float) -> str:
    return (f"{seconds_to_days(average_seconds)} days average closing time. "
            f"{seconds_to_days(median_seconds)} days median closing time.")
