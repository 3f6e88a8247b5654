#!/usr/bin/env python3
"""
Smoke tests for basic functionality validation
Quick tests to ensure core functionality works after changes
Run with: uv run tests/test_smoke.py
"""
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "requests",
#     "pandas",
#     "python-dotenv",
#     "matplotlib",
#     "rich",
# ]
# ///

import sys
import subprocess
import tempfile
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

def test_core_imports():
    """Test that all core modules can be imported"""
    print("🧪 Testing core imports...")

    import issue_stats
    from github_issues import GitHubIssues
    from github_client import GitHubIssuesClient, FetchError
    from issue_store import IssueStore, StoreError
    from sync_issues import IssueSyncPolicy
    from period_stats import group_by_period
    from report_generator import ReportGenerator
    from utils_filtering import filter_by_labels
    from utils_dates import parse_issue_date

    assert callable(issue_stats.main)
    print("✅ All core modules import successfully")

def test_utility_functions():
    """Test core utility functions with basic inputs"""
    print("🧪 Testing utility functions...")

    from models import IssueRecord, normalize_label_names
    from utils import format_labels_for_display, seconds_to_days
    from utils_filtering import filter_by_labels
    from utils_dates import parse_issue_date

    labels = [{'name': 'Type/Bug'}, {'name': 'Product/AI'}]
    result = normalize_label_names(labels)
    assert result == ['Product/AI', 'Type/Bug']

    assert format_labels_for_display(result) == 'Product/AI, Type/Bug'
    assert seconds_to_days(3 * 86400) == 3

    issue = IssueRecord(number=123, created_at=parse_issue_date('2024-01-15T10:00:00Z'),
                        closed_at=None, state='open', labels=labels)
    assert filter_by_labels([issue], ['Type/Bug']) == [issue]
    assert filter_by_labels([issue], ['!Type/Bug']) == []

    print("✅ Utility functions work correctly")

def test_cli_interfaces():
    """Test that CLI interfaces respond correctly"""
    print("🧪 Testing CLI interfaces...")

    result = subprocess.run(
        [sys.executable, 'issue_stats.py', '--help'],
        capture_output=True, text=True, timeout=30, cwd=Path(__file__).parent.parent
    )
    assert result.returncode == 0
    assert 'Analyse GitHub repository issues lifecycle' in result.stdout

    result = subprocess.run(
        [sys.executable, 'issue_stats.py', 'yearly', '--help'],
        capture_output=True, text=True, timeout=30, cwd=Path(__file__).parent.parent
    )
    assert result.returncode == 0
    assert '--label' in result.stdout

    print("✅ CLI interfaces work correctly")

def test_service_classes():
    """Test that service classes can be instantiated"""
    print("🧪 Testing service classes...")

    from config import IssuesSettings
    from github_client import GitHubIssuesClient
    from issue_store import IssueStore
    from report_generator import ReportGenerator

    client = GitHubIssuesClient({'access_token': 'fake_token'})
    assert client.session.headers['Authorization'] == 'token fake_token'

    with tempfile.TemporaryDirectory() as temp_dir:
        settings = IssuesSettings(cache_dir=temp_dir)
        with IssueStore(settings.cache_dir / 'issues.db') as store:
            assert store.count() == 0

    generator = ReportGenerator('Month', finished=True)
    assert generator.header()[0] == 'Month'

    print("✅ Service classes instantiate correctly")

def main():
    """Run all smoke tests"""
    print("🚀 Running smoke tests...")
    print("=" * 50)

    tests = [
        test_core_imports,
        test_utility_functions,
        test_cli_interfaces,
        test_service_classes
    ]

    passed = 0
    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"❌ {test.__name__} failed: {e!r}")
        print()

    print("=" * 50)
    if passed == len(tests):
        print(f"🎉 ALL {len(tests)} SMOKE TESTS PASSED!")
        print("✅ Core functionality verified")
        return 0
    else:
        print(f"❌ {len(tests) - passed}/{len(tests)} TESTS FAILED!")
        return 1

if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
