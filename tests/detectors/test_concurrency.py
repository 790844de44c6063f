"""
Tests for goroutine and channel detection.
"""

from workflow_lint.analysis.callgraph import build_edges
from workflow_lint.analysis.classifier import FunctionClassifier
from workflow_lint.analysis.parsing import GoSourceParser, build_import_aliases
from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.detectors import ChannelDetector, GoroutineDetector
from workflow_lint.detectors.concurrency import CONCURRENCY_RULE
from workflow_lint.models import FileRecord


def run(detector, path, package_path="testdata"):
  parsed = GoSourceParser().parse_file(path)
  aliases = build_import_aliases(parsed.imports)
  registry = WorkflowRegistry()
  registry.apply(FunctionClassifier().classify(parsed, package_path, aliases))
  registry.add_edges(build_edges(parsed, package_path, aliases))
  record = FileRecord(path=path, tree=parsed, import_aliases=aliases, package_path=package_path)
  return detector.detect(record, registry)


def test_goroutine_in_workflow(testdata_dir):
  issues = run(GoroutineDetector(), testdata_dir / "goroutine_violation.go")
  assert [(i.rule, i.line, i.column) for i in issues] == [(CONCURRENCY_RULE, 8, 2)]
  assert "workflow.Go" in issues[0].message


def test_goroutine_and_channel_in_registered_workflow(testdata_dir):
  path = testdata_dir / "workflow_violation.go"

  goroutines = run(GoroutineDetector(), path)
  assert [(i.line, i.column) for i in goroutines] == [(13, 2)]

  channels = run(ChannelDetector(), path)
  assert [(i.line, i.column) for i in channels] == [(14, 12)]
  assert channels[0].message == "Detected channel creation in workflow. Use workflow.NewChannel(ctx) instead."


def test_activity_may_use_goroutines_and_channels(testdata_dir):
  path = testdata_dir / "activity_ok.go"
  assert run(GoroutineDetector(), path) == []
  assert run(ChannelDetector(), path) == []


def test_make_without_channel_is_ignored(tmp_path):
  path = tmp_path / "flow.go"
  path.write_text(
    "package flow\n\n"
    'import "go.uber.org/cadence/workflow"\n\n'
    "func Flow(ctx workflow.Context) {\n"
    "\tm := make(map[string]int)\n"
    "\ts := make([]int, 0)\n"
    "\tc := workflow.NewChannel(ctx)\n"
    "\t_, _, _ = m, s, c\n"
    "}\n"
  )
  assert run(ChannelDetector(), path, "flow") == []
