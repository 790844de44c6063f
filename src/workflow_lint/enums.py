"""
Enumerations for workflow-lint.

This module defines standard enumerations used across the codebase for
import classification, issue severity and function classification.
"""

from enum import Enum


class ImportKind(str, Enum):
  """
  Classification of a Go import path.

  Produced by ``ImportClassifier`` from ``go.mod`` data plus heuristics.
  """

  STDLIB = "stdlib"
  INTERNAL = "internal"
  REPLACED_LOCAL = "replaced_local"  # replace => ./dir
  REPLACED = "replaced"  # replace => other/module vX
  FRAMEWORK = "framework"  # cadence / temporal SDK
  SAFE = "safe"  # vetted third-party
  THIRD_PARTY = "third_party"


class Severity(str, Enum):
  """
  Issue severities, ordered from least to most severe.
  """

  INFO = "info"
  WARNING = "warning"
  ERROR = "error"

  @property
  def rank(self) -> int:
    """Numeric rank used for ``--fail-on`` thresholds."""
    return _SEVERITY_RANK[self]

  @classmethod
  def parse(cls, value: str) -> "Severity":
    """
    Lenient conversion from rule-file text.

    Unknown values map to ERROR so that a typo never hides a finding.
    """
    try:
      return cls(str(value).strip().lower())
    except ValueError:
      return cls.ERROR


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class FunctionKind(str, Enum):
  """
  Role a function plays in a durable-workflow program.
  """

  WORKFLOW = "workflow"
  ACTIVITY = "activity"


class OutputFormat(str, Enum):
  JSON = "json"
  YAML = "yaml"
  TABLE = "table"
