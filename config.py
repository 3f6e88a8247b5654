"""
Configuration module for GitHub Issue Statistics
Contains all configurable constants and settings used across the application.
"""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised for malformed refresh intervals or configuration files"""
    pass


# ============================================================================
# STORAGE
# ============================================================================

# Issue databases live at <cache dir>/<owner>/<repo>/issues.db
DEFAULT_CACHE_DIR: Path = Path.home() / '.cache' / 'gh-issues-stats'
DATABASE_NAME: str = 'issues.db'


# ============================================================================
# REFRESH POLICY
# ============================================================================

DEFAULT_REFRESH_INTERVAL: str = '24hours'

REFRESH_INTERVAL_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)(seconds?|minutes?|hours?|days?)$')

REFRESH_UNIT_SECONDS: Dict[str, int] = {
    'second': 1,
    'minute': 60,
    'hour': 60 * 60,
    'day': 60 * 60 * 24,
}


# ============================================================================
# GITHUB API
# ============================================================================

GITHUB_API_URL: str = 'https://api.github.com'
ISSUES_PER_PAGE: int = 100


# ============================================================================
# CREDENTIALS
# ============================================================================

DEFAULT_CONFIG_FILE: Path = Path.home() / '.config' / 'gh-issues-stats.json'


# ============================================================================
# REPORT FORMATTING
# ============================================================================

OUTPUT_FORMATS: List[str] = ['table', 'chart', 'json', 'csv']
LABEL_TABLE_COLUMNS: int = 3
CHART_OUTPUT_FILE: str = 'issues_{period}.png'
CSV_OUTPUT_FILE: str = 'issues_{period}.csv'


@dataclass
class IssuesSettings:
    """Explicit settings handed to the GitHubIssues service"""
    cache_dir: Path = DEFAULT_CACHE_DIR
    refresh_seconds: float = 24 * 60 * 60
    credentials: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.cache_dir = Path(self.cache_dir).expanduser()
        if self.refresh_seconds < 0:
            raise ConfigurationError(f"Refresh interval must not be negative: {self.refresh_seconds}")


# ============================================================================
# PARSING HELPERS
# ============================================================================

def parse_refresh_interval(interval: Optional[str]) -> float:
    """
    Parse refresh interval strings like '30minutes', '2.5hours' or '1day'.

    Args:
        interval: Interval string, None selects the default of 24 hours

    Returns:
        Refresh interval in seconds
    """
    interval = (interval or DEFAULT_REFRESH_INTERVAL).strip()
    match = REFRESH_INTERVAL_PATTERN.match(interval)
    if not match:
        raise ConfigurationError(
            f"Invalid refresh interval format: '{interval}'. "
            "Use format like '30minutes', '2hours', '1day'"
        )

    value = float(match.group(1))
    unit = match.group(2).rstrip('s')
    return value * REFRESH_UNIT_SECONDS[unit]


def load_credentials(config_file: Union[str, Path, None] = None) -> Dict[str, Any]:
    """
    Load GitHub API credentials from a JSON configuration file.

    A missing file yields no file credentials. GITHUB_TOKEN from the
    environment (or a .env file) is used when the file has no access_token.
    """
    path = Path(config_file).expanduser() if config_file else DEFAULT_CONFIG_FILE
    credentials: Dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, encoding='utf-8') as f:
                loaded = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration file '{path}': {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file '{path}': {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Configuration file '{path}' must contain a JSON object")
        credentials.update(loaded)

    if not credentials.get('access_token'):
        token = get_github_token()
        if token:
            credentials['access_token'] = token

    return credentials


def resolve_cache_path(path: Union[str, Path, None] = None) -> Path:
    """Cache directory from the command line or the default location"""
    return Path(path).expanduser() if path else DEFAULT_CACHE_DIR


# ============================================================================
# ENVIRONMENT VARIABLE HELPERS
# ============================================================================

def get_github_token() -> str:
    """Get GitHub token from environment variables (or a .env file)."""
    load_dotenv()
    return os.getenv('GITHUB_TOKEN', '')


__all__ = [
    'ConfigurationError',
    'IssuesSettings',
    'DEFAULT_CACHE_DIR',
    'DATABASE_NAME',
    'DEFAULT_REFRESH_INTERVAL',
    'GITHUB_API_URL',
    'ISSUES_PER_PAGE',
    'DEFAULT_CONFIG_FILE',
    'OUTPUT_FORMATS',
    'LABEL_TABLE_COLUMNS',
    'CHART_OUTPUT_FILE',
    'CSV_OUTPUT_FILE',
    'parse_refresh_interval',
    'load_credentials',
    'resolve_cache_path',
    'get_github_token',
]
