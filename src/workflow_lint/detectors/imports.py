"""
Disallowed Import Detection.

Reports import declarations listed in ``disallowed_imports``. Imports are
file-level, so the file's functions decide whether and how loudly to report:

*   some function in the file is workflow-reachable: rule severity;
*   otherwise, the file declares activities: downgraded to ``warning``;
*   otherwise (plain helper file no workflow touches): not reported.
"""

from typing import List

from workflow_lint.analysis.callgraph import canonical
from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.detectors.base import Detector
from workflow_lint.enums import Severity
from workflow_lint.models import FileRecord, Issue
from workflow_lint.rules.schema import RuleSet


class ImportDetector(Detector):
  name = "imports"

  def __init__(self, rules: RuleSet):
    self.rules = rules

  def detect(self, record: FileRecord, registry: WorkflowRegistry) -> List[Issue]:
    if not self.rules.disallowed_imports:
      return []

    names = [canonical(record.package_path, d.local_name) for d in record.tree.functions]
    has_workflow_code = any(registry.is_workflow_reachable(n) for n in names)
    has_activities = any(registry.is_activity(n) for n in names)
    if not has_workflow_code and not has_activities:
      return []

    issues: List[Issue] = []
    for spec in record.tree.imports:
      rule = self.rules.import_rule(spec.path)
      if rule is None:
        continue
      severity = rule.severity if has_workflow_code else Severity.WARNING
      issues.append(self.make_issue(record, spec.node, rule.rule, severity, rule.render(spec.default_alias)))
    return issues
