"""
Rule tables consumed by the violation detectors.
"""

from workflow_lint.rules.loader import load_rules, parse_rules, resolve_default_rules
from workflow_lint.rules.schema import (
  ExternalPackageRule,
  FunctionRule,
  ImportRule,
  RuleDescriptor,
  RuleSet,
)

__all__ = [
  "ExternalPackageRule",
  "FunctionRule",
  "ImportRule",
  "RuleDescriptor",
  "RuleSet",
  "load_rules",
  "parse_rules",
  "resolve_default_rules",
]
