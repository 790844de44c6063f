"""
Qualified Call Detection.

Flags ``pkg.Func`` references inside workflow-reachable functions using three
lookups, in order:

1.  **Function rules**: standard library calls such as ``time.Now`` or
    ``rand.Intn``.
2.  **External package rules**: known-bad third-party calls such as
    ``uuid.New``.
3.  **Unknown externals**: any other third-party package that is not on the
    safe list and not part of the project produces an ``info`` issue asking
    for manual review. When a ``go.mod`` is present and no ``require``
    directive covers the package, the message says so.

The selector's qualifier is resolved through the file's import alias table,
falling back to the qualifier text for single-segment standard library names.
"""

from typing import Dict, List, Optional, Tuple

from tree_sitter import Node

from workflow_lint.analysis.imports import ImportClassifier
from workflow_lint.analysis.parsing import node_text, walk
from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.detectors.base import Detector
from workflow_lint.enums import Severity
from workflow_lint.models import FileRecord, Issue
from workflow_lint.rules.schema import FunctionRule, RuleSet

UNKNOWN_EXTERNAL_RULE = "UnknownExternalCall"
UNDECLARED_SUFFIX = " (not required by go.mod)"


class FuncCallDetector(Detector):
  """
  Rule-table driven detector for qualified calls.

  Attributes:
      function_rules: (import path, name) -> rule for standard library calls.
      external_rules: (import path, name) -> rule for third-party calls.
      classifier: Import classifier for the unknown-external check.
      report_unknown: Whether calls into unvetted third-party packages are
          reported at all.
  """

  name = "func-calls"

  def __init__(self, rules: RuleSet, classifier: Optional[ImportClassifier] = None, report_unknown: bool = True):
    self.function_rules: Dict[Tuple[str, str], FunctionRule] = rules.function_table()
    self.external_rules: Dict[Tuple[str, str], FunctionRule] = rules.external_table()
    self.known_packages = set(rules.known_packages())
    self.classifier = classifier or ImportClassifier(safe_packages=rules.safe_external_packages)
    self.report_unknown = report_unknown

  def detect(self, record: FileRecord, registry: WorkflowRegistry) -> List[Issue]:
    issues: List[Issue] = []
    for decl, qualified in self.reachable_functions(record, registry):
      call_stack = registry.call_path_to(qualified)
      for node in walk(decl.body):
        if node.type != "selector_expression":
          continue
        issue = self._check_selector(node, record, decl.local_name, call_stack)
        if issue is not None:
          issues.append(issue)
    return issues

  def _check_selector(self, node: Node, record: FileRecord, func: str, call_stack: List[str]) -> Optional[Issue]:
    operand = node.child_by_field_name("operand")
    field = node.child_by_field_name("field")
    if operand is None or field is None or operand.type != "identifier":
      return None

    alias = node_text(operand)
    import_path = record.import_aliases.get(alias) or alias
    func_name = node_text(field)

    rule = self.function_rules.get((import_path, func_name)) or self.external_rules.get((import_path, func_name))
    if rule is not None:
      return self.make_issue(
        record, field, rule.rule, rule.severity, rule.render(func_name), func=func, call_stack=call_stack
      )

    if not self.report_unknown or alias not in record.import_aliases:
      return None
    if self.classifier.is_unknown_external(import_path, self.known_packages):
      message = f"Call to unknown external package {import_path}.{func_name}() - please verify it's workflow-safe"
      if self.classifier.is_undeclared(import_path):
        message += UNDECLARED_SUFFIX
      return self.make_issue(
        record,
        field,
        UNKNOWN_EXTERNAL_RULE,
        Severity.INFO,
        message,
        func=func,
        call_stack=call_stack,
      )
    return None
