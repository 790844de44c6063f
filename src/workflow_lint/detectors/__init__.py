"""
Violation Detectors.

Stateless predicate tables over qualified call names and syntax shapes. Every
detector consults the ``WorkflowRegistry`` before emitting a finding.

Modules:
    - ``base``: The ``Detector`` interface and shared helpers.
    - ``func_calls``: Rule-driven ``pkg.Func`` checks plus unknown third-party calls.
    - ``imports``: Disallowed import paths.
    - ``concurrency``: Goroutines and native channels.
"""

from typing import List, Optional

from workflow_lint.analysis.imports import ImportClassifier
from workflow_lint.detectors.base import Detector
from workflow_lint.detectors.concurrency import ChannelDetector, GoroutineDetector
from workflow_lint.detectors.func_calls import FuncCallDetector
from workflow_lint.detectors.imports import ImportDetector
from workflow_lint.rules.schema import RuleSet


def default_detectors(
  rules: RuleSet, classifier: Optional[ImportClassifier] = None, report_unknown: bool = True
) -> List[Detector]:
  """
  Builds the standard detector set.

  Args:
      rules: Loaded rule tables.
      classifier: Import classifier (manifest-aware) for the unknown-external check.
      report_unknown: Emit ``UnknownExternalCall`` issues.

  Returns:
      List[Detector]: Fresh detector instances.
  """
  return [
    FuncCallDetector(rules, classifier, report_unknown=report_unknown),
    ImportDetector(rules),
    GoroutineDetector(),
    ChannelDetector(),
  ]


__all__ = [
  "ChannelDetector",
  "Detector",
  "FuncCallDetector",
  "GoroutineDetector",
  "ImportDetector",
  "default_detectors",
]
