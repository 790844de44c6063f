"""
Main Entry Point for the workflow-lint CLI.

This module handles argument parsing and dispatches to the scan handler
defined in `workflow_lint.cli.handlers`.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from workflow_lint import __version__
from workflow_lint.cli import handlers
from workflow_lint.enums import OutputFormat, Severity
from workflow_lint.utils.console import set_verbosity


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog="workflow-lint",
    description="workflow-lint: Determinism checks for Cadence/Temporal Go workflows",
  )
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("path", type=Path, help="Go source file or directory")
  parser.add_argument(
    "--format",
    dest="output_format",
    choices=[f.value for f in OutputFormat],
    default=None,
    help="Output format (default: from pyproject.toml, else json)",
  )
  parser.add_argument("--rules", type=Path, default=None, help="Path to a rules YAML file (default: bundled rules)")
  parser.add_argument("--workers", type=int, default=None, help="Threads used to parse files")
  parser.add_argument(
    "--fail-on",
    choices=[s.value for s in Severity] + ["none"],
    default=None,
    help="Exit non-zero when an issue at or above this severity exists (default: error)",
  )
  parser.add_argument(
    "--module",
    dest="project_module",
    default=None,
    help="Module path to assume for the target when it has no go.mod",
  )
  parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
  parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
  return parser


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = build_parser()
  args = parser.parse_args(argv)

  set_verbosity(verbose=args.verbose, quiet=args.quiet)

  return handlers.handle_scan(
    args.path,
    output_format=args.output_format,
    rules_path=args.rules,
    workers=args.workers,
    fail_on=args.fail_on,
    project_module=args.project_module,
  )
