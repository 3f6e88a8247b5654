#!/usr/bin/env python3
"""
GitHub Issues Lifecycle Statistics

Shows issues created and closed per year or month, closed/created ratios and
closing times for a GitHub repository. Issues are cached locally and refreshed
incrementally once the refresh interval has passed.
"""
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "requests",
#     "pandas",
#     "matplotlib",
#     "python-dotenv",
#     "rich",
# ]
# ///

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.text import Text

from config import (
    CHART_OUTPUT_FILE,
    CSV_OUTPUT_FILE,
    DEFAULT_CONFIG_FILE,
    DEFAULT_REFRESH_INTERVAL,
    LABEL_TABLE_COLUMNS,
    OUTPUT_FORMATS,
    ConfigurationError,
    IssuesSettings,
    load_credentials,
    parse_refresh_interval,
    resolve_cache_path,
)
from github_client import FetchError, GitHubIssuesClient, RepositoryNotFoundError
from github_issues import GitHubIssues
from issue_store import StoreError
from period_stats import PeriodBucket
from report_generator import ReportGenerator, closing_time_summary, labels_table
from utils import format_labels_for_display

__version__ = '1.0.0'


class StatusDisplay:
    """Handle status updates with a rich live line"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.live = None
        self.current_status = ""

    def start(self, initial_message: str = "Starting..."):
        """Start the status display"""
        self.current_status = initial_message
        text = Text(initial_message, style="cyan")
        self.live = Live(text, console=self.console, refresh_per_second=4, transient=True)
        self.live.start()

    def update(self, message: str, style: str = "cyan"):
        """Update the status message"""
        self.current_status = message
        if self.live:
            self.live.update(Text(message, style=style))

    def stop(self, final_message: Optional[str] = None):
        """Stop the status display"""
        if self.live:
            self.live.stop()
            self.live = None
        if final_message:
            self.console.print(final_message, style="green")

    def run(self, message: str, func: Callable, *args, **kwargs):
        """Call func while showing message, like a spinner"""
        self.start(message)
        try:
            result = func(*args, **kwargs)
        except BaseException:
            self.stop()
            raise
        self.stop("Done.")
        return result


def bailout(message: str, console: Optional[Console] = None) -> int:
    """Print an error message in red and return the failure exit status"""
    console = console or Console(stderr=True)
    console.print(message, style="red bold")
    return 1


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def output_report(buckets: Dict[int, PeriodBucket], args: argparse.Namespace, period_name: str,
                  console: Console, extra: Optional[str] = None) -> int:
    """Render buckets in the requested format"""
    report = ReportGenerator(period_name=period_name, finished=args.finished)

    if args.format == 'json':
        console.print_json(report.to_json(buckets))
        return 0

    if args.format == 'csv':
        path = report.write_csv(buckets, args.output or CSV_OUTPUT_FILE.format(period=period_name.lower()))
        console.print(f"CSV data written to: {path}", style="blue", soft_wrap=True)
        return 0

    if args.format == 'chart':
        path = report.write_chart(buckets, args.output or CHART_OUTPUT_FILE.format(period=period_name.lower()))
        console.print(f"Chart written to: {path}", style="blue", soft_wrap=True)
        return 0

    def render():
        if args.label:
            console.print(f"Labels: {format_labels_for_display(args.label)}", style="bold", markup=False)
        console.print(report.table(buckets))
        if args.legend:
            console.print(report.legend(buckets, extra=extra))

    if args.pager:
        with console.pager():
            render()
    else:
        render()
    return 0


def run_yearly(issues: GitHubIssues, args: argparse.Namespace, console: Console, status: StatusDisplay) -> int:
    labels = args.label or []
    buckets = status.run("Fetching data ...", issues.per_year, labels)
    if not buckets:
        return bailout("No issues found.")

    extra = closing_time_summary(
        issues.average_closing_time_filtered_by_labels(labels),
        issues.median_closing_time_filtered_by_labels(labels),
    )
    return output_report(buckets, args, 'Year', console, extra=extra)


def run_monthly(issues: GitHubIssues, args: argparse.Namespace, console: Console, status: StatusDisplay) -> int:
    labels = args.label or []
    buckets = status.run("Fetching data ...", issues.per_month, args.year, labels)
    if not buckets:
        return bailout("No issues found.")
    return output_report(buckets, args, 'Month', console)


def run_labels(issues: GitHubIssues, args: argparse.Namespace, console: Console, status: StatusDisplay) -> int:
    labels: List[str] = status.run("Fetching data ...", issues.labels)

    if args.json:
        console.print_json(data=labels)
        return 0

    console.print(labels_table(labels, LABEL_TABLE_COLUMNS))
    console.print(f"\nTotal labels: {len(labels)}")
    return 0


COMMANDS = {
    'yearly': run_yearly,
    'monthly': run_monthly,
    'labels': run_labels,
}


def _add_report_options(parser: argparse.ArgumentParser, legend_help: str = 'Print totals below the table'):
    parser.add_argument('--label', action='append', metavar='LABEL',
                        help="Filter by label (repeatable; prefix with '!' to exclude)")
    parser.add_argument('--format', choices=OUTPUT_FORMATS, default='table', help='Output format (default: table)')
    parser.add_argument('--output', '-o', help='Output file for chart and csv formats')
    parser.add_argument('--finished', action=argparse.BooleanOptionalAction, default=False,
                        help='Show statistics about issues created and closed in the same period')
    parser.add_argument('--legend', action=argparse.BooleanOptionalAction, default=True,
                        help=legend_help)
    parser.add_argument('--pager', action=argparse.BooleanOptionalAction, default=False,
                        help='Pipe output into a pager')


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--configuration-file', metavar='FILE',
                        help=f'JSON file with GitHub credentials (default: {DEFAULT_CONFIG_FILE})')
    common.add_argument('--cache-path', metavar='PATH', help='Cache path (default: ~/.cache/gh-issues-stats)')
    common.add_argument('--refresh', metavar='INTERVAL',
                        help=f'Refresh interval, e.g. 30minutes, 2.5hours, 1day (default: {DEFAULT_REFRESH_INTERVAL})')
    common.add_argument('--verbose', '-v', action='store_true', help='Show debug logging')

    parser = argparse.ArgumentParser(
        prog='gh-issue-stats',
        description='Analyse GitHub repository issues lifecycle.',
        epilog='''
Examples:
  gh-issue-stats yearly rails/rails
  gh-issue-stats monthly 2023 rails/rails --format chart
  gh-issue-stats yearly rails/rails --label bug --label '!enhancement'
  gh-issue-stats labels rails/rails

Caching:
  Issues are cached in the cache path and refreshed from GitHub once the
  refresh interval has passed. Set GITHUB_TOKEN (or access_token in the
  configuration file) for higher API rate limits.
        ''',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    subparsers = parser.add_subparsers(dest='command', required=True)

    yearly = subparsers.add_parser('yearly', parents=[common], help='Show issues per year.')
    yearly.add_argument('repository', help='Repository to analyze (owner/repo)')
    _add_report_options(yearly, legend_help=('Print totals and the average and median closing time below the '
                                             'table; closing times cover only the issues selected by --label'))

    monthly = subparsers.add_parser('monthly', parents=[common], help='Show issues per month.')
    monthly.add_argument('year', type=int, help='Year to show')
    monthly.add_argument('repository', help='Repository to analyze (owner/repo)')
    _add_report_options(monthly)

    labels = subparsers.add_parser('labels', parents=[common], help='List all labels.')
    labels.add_argument('repository', help='Repository to analyze (owner/repo)')
    labels.add_argument('--json', action='store_true', help='Output in JSON format')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function"""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    console = Console()
    status = StatusDisplay()

    try:
        settings = IssuesSettings(
            cache_dir=resolve_cache_path(args.cache_path),
            refresh_seconds=parse_refresh_interval(args.refresh),
            credentials=load_credentials(args.configuration_file),
        )
        client = GitHubIssuesClient(settings.credentials, progress=status.update)
        with GitHubIssues(args.repository, settings, client=client) as issues:
            return COMMANDS[args.command](issues, args, console, status)
    except RepositoryNotFoundError:
        return bailout(f"Repository '{args.repository}' not found.")
    except (FetchError, StoreError, ConfigurationError) as e:
        return bailout(str(e))
    except KeyboardInterrupt:
        return bailout("Interrupted.")


if __name__ == "__main__":
    sys.exit(main())
