"""
Unmanaged Concurrency Detection.

Native goroutines and channels are scheduled by the Go runtime, not by the
workflow engine, so their interleaving is not replayed deterministically.
Workflows must use ``workflow.Go`` and ``workflow.NewChannel`` instead.
"""

from typing import List

from workflow_lint.analysis.parsing import node_text, walk
from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.detectors.base import Detector
from workflow_lint.enums import Severity
from workflow_lint.models import FileRecord, Issue

CONCURRENCY_RULE = "Concurrency"


class GoroutineDetector(Detector):
  """Flags ``go`` statements in workflow-reachable functions."""

  name = "goroutines"

  def detect(self, record: FileRecord, registry: WorkflowRegistry) -> List[Issue]:
    issues: List[Issue] = []
    for decl, qualified in self.reachable_functions(record, registry):
      for node in walk(decl.body):
        if node.type == "go_statement":
          issues.append(
            self.make_issue(
              record,
              node,
              CONCURRENCY_RULE,
              Severity.ERROR,
              "Detected goroutine in workflow. Use workflow.Go(ctx) instead.",
              func=decl.local_name,
              call_stack=registry.call_path_to(qualified),
            )
          )
    return issues


class ChannelDetector(Detector):
  """Flags ``make(chan T)`` in workflow-reachable functions."""

  name = "channels"

  def detect(self, record: FileRecord, registry: WorkflowRegistry) -> List[Issue]:
    issues: List[Issue] = []
    for decl, qualified in self.reachable_functions(record, registry):
      for node in walk(decl.body):
        if node.type != "call_expression":
          continue
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if function is None or arguments is None or function.type != "identifier" or node_text(function) != "make":
          continue
        args = [a for a in arguments.named_children if a.type != "comment"]
        if args and args[0].type == "channel_type":
          issues.append(
            self.make_issue(
              record,
              arguments,
              CONCURRENCY_RULE,
              Severity.ERROR,
              "Detected channel creation in workflow. Use workflow.NewChannel(ctx) instead.",
              func=decl.local_name,
              call_stack=registry.call_path_to(qualified),
            )
          )
    return issues
