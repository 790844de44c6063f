"""
Report Rendering.

Machine-readable output is a flat list of issue objects (``file``, ``line``,
``column``, ``rule``, ``severity``, ``message`` and, when known, ``func`` and
``call_stack``). The table format is meant for terminals.
"""

import json
from typing import Any, Dict, List

import yaml
from rich.markup import escape
from rich.table import Table

from workflow_lint.enums import OutputFormat, Severity
from workflow_lint.models import Issue, ScanResult

_SEVERITY_STYLE = {
  Severity.ERROR: "bold red",
  Severity.WARNING: "yellow",
  Severity.INFO: "dim cyan",
}


def issues_to_dicts(issues: List[Issue]) -> List[Dict[str, Any]]:
  return [issue.to_dict() for issue in issues]


def render_json(result: ScanResult) -> str:
  return json.dumps(issues_to_dicts(result.issues), indent=2)


def render_yaml(result: ScanResult) -> str:
  # An empty list dumps as "[]", matching the JSON form.
  return yaml.safe_dump(issues_to_dicts(result.issues), sort_keys=False, allow_unicode=True)


def render_table(result: ScanResult) -> Table:
  """
  Builds a Rich table of issues.

  Args:
      result: The scan result.

  Returns:
      Table: One row per issue; the caption summarises counts by severity.
  """
  table = Table(title="Workflow Determinism Issues")
  table.add_column("Location", style="bold blue")
  table.add_column("Rule", style="bold magenta")
  table.add_column("Severity")
  table.add_column("Function", style="cyan")
  table.add_column("Message")

  for issue in result.issues:
    style = _SEVERITY_STYLE[issue.severity]
    location = f"{issue.file}:{issue.line}:{issue.column}"
    func = " -> ".join(issue.call_stack) if issue.call_stack else issue.func
    table.add_row(escape(location), issue.rule, f"[{style}]{issue.severity.value}[/{style}]", func, escape(issue.message))

  counts = {sev: 0 for sev in Severity}
  for issue in result.issues:
    counts[issue.severity] += 1
  table.caption = (
    f"{result.files_scanned} files scanned, "
    f"{counts[Severity.ERROR]} errors, {counts[Severity.WARNING]} warnings, {counts[Severity.INFO]} info"
  )
  return table


def render(result: ScanResult, output_format: OutputFormat) -> Any:
  """
  Renders a result in the requested format.

  Returns:
      str for JSON and YAML, a ``rich.table.Table`` for the table format.
  """
  if output_format is OutputFormat.YAML:
    return render_yaml(result)
  if output_format is OutputFormat.TABLE:
    return render_table(result)
  return render_json(result)
