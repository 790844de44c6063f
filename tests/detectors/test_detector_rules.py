"""
Tests for the rule-driven call and import detectors on single files.
"""

from pathlib import Path

from workflow_lint.analysis.callgraph import build_edges
from workflow_lint.analysis.classifier import FunctionClassifier
from workflow_lint.analysis.imports import ImportClassifier
from workflow_lint.analysis.manifest import parse_manifest_text
from workflow_lint.analysis.parsing import GoSourceParser, build_import_aliases
from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.detectors import FuncCallDetector, ImportDetector
from workflow_lint.detectors.func_calls import UNKNOWN_EXTERNAL_RULE
from workflow_lint.enums import Severity
from workflow_lint.models import FileRecord


def analyse(path: Path, package_path: str = "testdata"):
  """Runs pass 1 for a single file and returns (record, registry)."""
  parsed = GoSourceParser().parse_file(path)
  aliases = build_import_aliases(parsed.imports)
  registry = WorkflowRegistry()
  registry.apply(FunctionClassifier().classify(parsed, package_path, aliases))
  registry.add_edges(build_edges(parsed, package_path, aliases))
  return FileRecord(path=path, tree=parsed, import_aliases=aliases, package_path=package_path), registry


def rules_at(issues):
  return [(i.rule, i.line) for i in issues]


def test_time_usage_only_in_workflow(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "time_violation.go")
  issues = FuncCallDetector(default_rules).detect(record, registry)
  assert rules_at(issues) == [("TimeUsage", 14)]
  assert issues[0].func == "MyWorkflow"
  assert issues[0].severity is Severity.ERROR
  assert "time.Now()" in issues[0].message


def test_randomness(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "rand_violation.go")
  issues = FuncCallDetector(default_rules).detect(record, registry)
  assert rules_at(issues) == [("Randomness", 14)]


def test_io_calls(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "io_violation.go")
  issues = FuncCallDetector(default_rules).detect(record, registry)
  assert rules_at(issues) == [("IOCalls", 16), ("IOCalls", 17)]
  assert [i.severity for i in issues] == [Severity.WARNING, Severity.ERROR]


def test_helpers_carry_call_stack(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "callgraph_example.go")
  issues = FuncCallDetector(default_rules).detect(record, registry)
  # activityHelper and standaloneFunction also call time.Now but are not reachable
  assert rules_at(issues) == [("TimeUsage", 19)]
  assert issues[0].call_stack == ["testdata.MyWorkflow"]


def test_helper_reached_from_workflow(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "helper_test.go")
  issues = FuncCallDetector(default_rules).detect(record, registry)
  assert rules_at(issues) == [("TimeUsage", 10)]
  assert issues[0].func == "Helper2"
  assert issues[0].call_stack == ["testdata.MyWorkflow", "testdata.Helper2"]


def test_external_packages(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "external_library_violation.go")
  issues = FuncCallDetector(default_rules).detect(record, registry)
  assert rules_at(issues) == [("UUIDGeneration", 14), ("ExternalIO", 17)]
  assert all(i.func == "ExternalLibraryWorkflow" for i in issues)


def test_unknown_external_packages(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "unknown_external_test.go")
  issues = FuncCallDetector(default_rules).detect(record, registry)

  assert [i.rule for i in issues] == ["UUIDGeneration", UNKNOWN_EXTERNAL_RULE, UNKNOWN_EXTERNAL_RULE]
  unknown = [i for i in issues if i.rule == UNKNOWN_EXTERNAL_RULE]
  assert all(i.severity is Severity.INFO for i in unknown)
  assert unknown[0].message == (
    "Call to unknown external package github.com/unknown/mystery-lib.DoSomething() - please verify it's workflow-safe"
  )


def test_unknown_external_uses_manifest_classifier(tmp_path, default_rules):
  source = """
  package svc

  import (
      "github.com/acme/orders/internal/db"
      "github.com/vendor/sdk"
      "go.uber.org/cadence/workflow"
  )

  func Flow(ctx workflow.Context) {
      db.Query()
      sdk.Call()
  }
  """
  path = tmp_path / "flow.go"
  path.write_text(source)
  record, registry = analyse(path, "github.com/acme/orders/svc")

  classifier = ImportClassifier(
    module_info=parse_manifest_text("module github.com/acme/orders\n"),
    safe_packages=default_rules.safe_external_packages,
  )
  issues = FuncCallDetector(default_rules, classifier).detect(record, registry)
  assert [i.message for i in issues] == [
    "Call to unknown external package github.com/vendor/sdk.Call() - please verify it's workflow-safe (not required by go.mod)"
  ]


def test_required_external_keeps_plain_message(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "unknown_external_test.go")
  classifier = ImportClassifier(
    module_info=parse_manifest_text("module example.com/app\n\nrequire github.com/unknown/mystery-lib v0.1.0\n"),
    safe_packages=default_rules.safe_external_packages,
  )
  issues = FuncCallDetector(default_rules, classifier).detect(record, registry)

  unknown = [i for i in issues if i.rule == UNKNOWN_EXTERNAL_RULE]
  assert len(unknown) == 2
  assert not any(i.message.endswith("(not required by go.mod)") for i in unknown)


def test_unknown_external_reporting_can_be_disabled(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "unknown_external_test.go")
  issues = FuncCallDetector(default_rules, report_unknown=False).detect(record, registry)
  assert [i.rule for i in issues] == ["UUIDGeneration"]


def test_activity_file_is_clean(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "activity_ok.go")
  assert registry.is_activity("testdata.MyActivity")
  assert FuncCallDetector(default_rules).detect(record, registry) == []
  assert ImportDetector(default_rules).detect(record, registry) == []


def test_disallowed_import_in_workflow_file(testdata_dir, default_rules):
  record, registry = analyse(testdata_dir / "rand_violation.go")
  issues = ImportDetector(default_rules).detect(record, registry)
  assert rules_at(issues) == [("ImportRandom", 4)]
  assert issues[0].severity is Severity.ERROR
  assert issues[0].column == 2


def test_disallowed_import_in_activity_only_file_is_downgraded(tmp_path, default_rules):
  path = tmp_path / "act.go"
  path.write_text('package act\n\nimport (\n\t"context"\n\t"math/rand"\n)\n\nfunc Pick(ctx context.Context) int { return rand.Intn(3) }\n')
  record, registry = analyse(path, "act")
  issues = ImportDetector(default_rules).detect(record, registry)
  assert [(i.rule, i.severity) for i in issues] == [("ImportRandom", Severity.WARNING)]


def test_disallowed_import_in_plain_file_is_ignored(tmp_path, default_rules):
  path = tmp_path / "plain.go"
  path.write_text('package plain\n\nimport "math/rand"\n\nfunc Pick() int { return rand.Intn(3) }\n')
  record, registry = analyse(path, "plain")
  assert ImportDetector(default_rules).detect(record, registry) == []
