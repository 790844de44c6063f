"""
Tests for report rendering.
"""

import json

import yaml
from rich.console import Console

from workflow_lint.enums import OutputFormat, Severity
from workflow_lint.models import Issue, ScanResult
from workflow_lint.reporting import render, render_json, render_table, render_yaml


def sample_result():
  return ScanResult(
    issues=[
      Issue(
        file="wf.go",
        line=3,
        column=7,
        rule="TimeUsage",
        severity=Severity.ERROR,
        message="Detected time.Now() in workflow.",
        func="helper",
        call_stack=["p.Flow", "p.helper"],
      ),
      Issue(file="wf.go", line=1, column=2, rule="ImportRandom", severity=Severity.WARNING, message="math/rand"),
    ],
    files_scanned=1,
  )


def test_json_omits_empty_optional_fields():
  data = json.loads(render_json(sample_result()))
  assert data[0]["call_stack"] == ["p.Flow", "p.helper"]
  assert data[0]["severity"] == "error"
  assert "call_stack" not in data[1]
  assert "func" not in data[1]


def test_yaml_matches_json():
  result = sample_result()
  assert yaml.safe_load(render_yaml(result)) == json.loads(render_json(result))


def test_empty_reports():
  empty = ScanResult()
  assert json.loads(render_json(empty)) == []
  assert yaml.safe_load(render_yaml(empty)) == []


def test_table_lists_issues():
  console = Console(record=True, width=200)
  console.print(render_table(sample_result()))
  text = console.export_text()
  assert "wf.go:3:7" in text
  assert "p.Flow -> p.helper" in text
  assert "1 errors, 1 warnings, 0 info" in text


def test_render_dispatch():
  result = sample_result()
  assert render(result, OutputFormat.JSON) == render_json(result)
  assert render(result, OutputFormat.YAML) == render_yaml(result)
  assert render(result, OutputFormat.TABLE).title == "Workflow Determinism Issues"
