"""
Scan Command Handler.

Loads configuration and rules, runs the two-pass scan and writes the report
to stdout. Diagnostics (skipped files, summaries) go to the log on stderr so
that JSON and YAML output stays machine-readable.
"""

from pathlib import Path
from typing import Optional

from workflow_lint.config import RuntimeConfig
from workflow_lint.enums import OutputFormat
from workflow_lint.errors import WorkflowLintError
from workflow_lint.reporting import render
from workflow_lint.rules import load_rules
from workflow_lint.scanner import Scanner
from workflow_lint.utils.console import console, log_error, log_info, log_success, log_warning


def handle_scan(
  path: Path,
  output_format: Optional[str] = None,
  rules_path: Optional[Path] = None,
  workers: Optional[int] = None,
  fail_on: Optional[str] = None,
  project_module: Optional[str] = None,
) -> int:
  """
  Scans a Go file or directory for workflow determinism issues.

  Args:
      path: Input ``.go`` file or directory.
      output_format: ``json``, ``yaml`` or ``table`` (overrides config).
      rules_path: Rule YAML file (overrides config).
      workers: Pass-1 thread count (overrides config).
      fail_on: Severity threshold for a failing exit code (overrides config).
      project_module: Module path to assume when no go.mod exists.

  Returns:
      int: 0 on success; 1 if the scan could not run, a file could not be
      parsed, or an issue at or above the threshold was found.
  """
  if not path.exists():
    log_error(f"Path not found: {path}")
    return 1

  try:
    config = RuntimeConfig.load(
      search_path=path,
      rules_path=rules_path,
      output_format=output_format,
      workers=workers,
      fail_on=fail_on,
      project_module=project_module,
    )
    rules = load_rules(config.rules_path)
    result = Scanner(config, rules).scan(path)
  except (WorkflowLintError, ValueError) as e:
    log_error(str(e))
    return 1

  report = render(result, config.output_format)
  if config.output_format is OutputFormat.TABLE:
    console.print(report)
  else:
    console.write_raw(report.rstrip("\n"))

  for failure in result.failures:
    log_warning(f"Skipped [path]{failure.file}[/path]: {failure.error}")

  if config.output_format is OutputFormat.TABLE:
    if result.issues:
      log_info(f"{len(result.issues)} issues in {result.files_scanned} files")
    else:
      log_success(f"No issues found in {result.files_scanned} files")

  if result.has_failures:
    return 1
  if config.fail_on is not None and result.issues_at_least(config.fail_on):
    return 1
  return 0
