#!/usr/bin/env python3
"""Run the mirrorsync test modules one at a time and summarize the results."""

import subprocess
import sys
from pathlib import Path

TEST_MODULES = [
    ("test_remote_classification.py", "Remote Classification"),
    ("test_branch_resolution.py", "Branch Resolution and Mapping"),
    ("test_divergence_analysis.py", "Divergence Analysis"),
    ("test_push_planning.py", "Push Planning"),
    ("test_tag_selection.py", "Tag Selection"),
    ("test_configuration.py", "Configuration"),
    ("test_credentials_and_masking.py", "Credentials and Masking"),
    ("test_error_handling.py", "Error Handling"),
    ("test_sync_orchestrator.py", "Sync Scenarios (in-memory remotes)"),
    ("test_cli.py", "Command-Line Entrypoint"),
    ("test_mcp_server.py", "MCP Server"),
    ("test_git_executor_integration.py", "Git Integration (local bare repositories)"),
]


def run_module(path: Path, description: str) -> bool:
    print(f"\n{'=' * 60}\n{description} ({path.name})\n{'=' * 60}")
    if not path.exists():
        print(f"⚠️  Test file not found: {path}")
        return False

    returncode = subprocess.run([sys.executable, "-m", "pytest", "-q", str(path)]).returncode
    print(f"{'✅ PASSED' if returncode == 0 else '❌ FAILED'}: {description}")
    return returncode == 0


def main() -> int:
    root = Path(__file__).parent
    selected = set(sys.argv[1:])
    modules = [(name, description) for name, description in TEST_MODULES if not selected or name in selected]

    results = [(description, run_module(root / name, description)) for name, description in modules]

    print(f"\n{'=' * 60}\nSUMMARY\n{'=' * 60}")
    for description, success in results:
        print(f"{'✅ PASS' if success else '❌ FAIL'} {description}")

    failed = sum(1 for _, success in results if not success)
    print(f"\n{len(results) - failed}/{len(results)} test modules passed")
    return 1 if failed else 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nTest run interrupted by user")
        sys.exit(1)
