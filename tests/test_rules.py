"""
Tests for rule file loading and the rule tables.
"""

import pytest

from workflow_lint.enums import Severity
from workflow_lint.errors import RulesError
from workflow_lint.rules import load_rules, parse_rules, resolve_default_rules


def test_default_rules_are_bundled():
  assert resolve_default_rules().name == "default_rules.yaml"
  rules = load_rules()
  table = rules.function_table()
  assert table[("time", "Now")].rule == "TimeUsage"
  assert table[("math/rand", "Intn")].rule == "Randomness"
  assert rules.external_table()[("github.com/google/uuid", "New")].rule == "UUIDGeneration"
  assert "go.uber.org/zap" in rules.safe_external_packages
  assert rules.import_rule("math/rand").rule == "ImportRandom"
  assert rules.import_rule("strings") is None


def test_message_placeholder_and_severity_normalisation():
  rules = parse_rules(
    """
function_calls:
  - rule: TimeUsage
    package: time
    functions: [Now, Since]
    severity: WARNING
    message: "time.%FUNC%() is not replay safe"
  - rule: Shadowed
    package: time
    functions: [Now]
    severity: bogus
"""
  )
  first, second = rules.function_calls
  assert first.severity is Severity.WARNING
  assert first.render("Since") == "time.Since() is not replay safe"
  assert second.severity is Severity.ERROR
  # Earlier rules win for duplicate (package, function) keys
  assert rules.function_table()[("time", "Now")].rule == "TimeUsage"


def test_known_packages():
  rules = parse_rules(
    """
function_calls:
  - {rule: A, package: time, functions: [Now]}
  - {rule: B, package: time, functions: [Since]}
external_packages:
  - {rule: C, package: github.com/google/uuid, functions: [New]}
"""
  )
  assert rules.known_packages() == ["time", "github.com/google/uuid"]


def test_empty_document_is_empty_ruleset():
  rules = parse_rules("")
  assert rules.function_calls == []
  assert rules.function_table() == {}


@pytest.mark.parametrize(
  "text",
  [
    "function_calls: [unterminated",
    "- just\n- a list\n",
    "function_calls:\n  - rule: Missing\n    functions: [Now]\n",
  ],
)
def test_invalid_rules(text):
  with pytest.raises(RulesError):
    parse_rules(text)


def test_missing_rules_file(tmp_path):
  with pytest.raises(RulesError, match="Cannot read rules file"):
    load_rules(tmp_path / "absent.yaml")
