#!/usr/bin/env python3
"""
Validate that a DDN project is ready for the Azure DevOps pipeline.

Exit code is 0 when every check passes or only warnings remain, 1 when
any check fails.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pipeline.models import CheckStatus, ValidationReport
from pipeline.settings import load_settings
from pipeline.validator import ConfigValidator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MARKERS = {
    CheckStatus.PASS: "✅",
    CheckStatus.WARN: "⚠️ ",
    CheckStatus.FAIL: "❌",
}


def print_report(report: ValidationReport) -> None:
    """Print results grouped by section, followed by the summary."""
    print("=" * 60)
    print("Azure DevOps Pipeline Configuration Validator")
    print("=" * 60)

    section = None
    for result in report.results:
        if result.section != section:
            section = result.section
            print(f"\n▶ {section}")
            print("-" * 60)
        print(f"  {MARKERS[result.status]} {result.message}")
        for line in result.details:
            print(f"      {line}")

    errors, warnings = len(report.errors), len(report.warnings)
    print("\n" + "=" * 60)
    print("Validation Summary")
    print("=" * 60)

    if errors == 0 and warnings == 0:
        print("✅ All checks passed!")
        print("\nYour configuration is ready for Azure DevOps pipeline.")
        print("\nNext steps:")
        print("  1. Commit your changes: git add . && git commit -m 'Add Azure pipeline'")
        print("  2. Push to Azure DevOps: git push")
        print("  3. Create the variable group in Azure DevOps")
        print("  4. Create pipeline in Azure DevOps")
    elif errors == 0:
        print(f"⚠️  Validation completed with {warnings} warning(s)")
        print("\nYou can proceed, but review the warnings above.")
    else:
        print(f"❌ Validation failed with {errors} error(s) and {warnings} warning(s)")
        print("\nPlease fix the errors above before proceeding.")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Validate DDN pipeline configuration")
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path("."),
        help="DDN project directory (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional YAML/JSON settings file overriding the default project layout",
    )
    parser.add_argument(
        "--skip-git",
        action="store_true",
        help="Skip git working tree checks",
    )
    parser.add_argument(
        "--skip-cli",
        action="store_true",
        help="Skip DDN CLI installation and authentication checks",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every check as it runs",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"❌ Could not load settings: {e}")
        return 1

    validator = ConfigValidator(
        project_root=str(args.project_root),
        settings=settings,
        check_cli=not args.skip_cli,
        check_git=not args.skip_git,
    )
    report = validator.validate()
    print_report(report)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
