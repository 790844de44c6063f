"""
Pydantic Schemas for Rule Files.

A rule file is YAML with four top-level sections:

.. code-block:: yaml

    function_calls:
      - rule: TimeUsage
        package: time
        functions: [Now, Since]
        severity: error
        message: "Detected time.%FUNC%() in workflow. Use workflow.Now(ctx) instead."
    disallowed_imports:
      - rule: ImportRandom
        path: math/rand
        severity: warning
        message: "math/rand imported in a workflow file."
    external_packages:
      - rule: UUIDGeneration
        package: github.com/google/uuid
        functions: [New]
        severity: error
        message: "uuid.%FUNC%() is non-deterministic."
    safe_external_packages:
      - go.uber.org/zap

``%FUNC%`` in messages is replaced by the called function name.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workflow_lint.enums import Severity

FUNC_PLACEHOLDER = "%FUNC%"


class RuleDescriptor(BaseModel):
  """Common fields of every rule."""

  model_config = ConfigDict(extra="ignore")

  rule: str = Field(..., description="Rule identifier reported in issues.")
  severity: Severity = Field(Severity.ERROR, description="Severity of produced issues.")
  message: str = Field("", description="Message template; %FUNC% is substituted.")

  @field_validator("severity", mode="before")
  @classmethod
  def normalize_severity(cls, v: object) -> Severity:
    """Accepts any casing; unknown values become 'error'."""
    if isinstance(v, Severity):
      return v
    return Severity.parse(str(v))

  def render(self, func_name: str) -> str:
    """Substitutes the function-name placeholder."""
    return self.message.replace(FUNC_PLACEHOLDER, func_name)


class FunctionRule(RuleDescriptor):
  """Flags calls to ``package.Function`` for the listed functions."""

  package: str = Field(..., description="Import path, e.g. 'time' or 'math/rand'.")
  functions: List[str] = Field(default_factory=list)


class ExternalPackageRule(FunctionRule):
  """Same shape as FunctionRule, for third-party packages."""


class ImportRule(RuleDescriptor):
  """Flags the presence of an import path."""

  path: str = Field(..., description="Import path that must not appear in workflow files.")


class RuleSet(BaseModel):
  """
  The complete rule configuration.
  """

  model_config = ConfigDict(extra="ignore")

  function_calls: List[FunctionRule] = Field(default_factory=list)
  disallowed_imports: List[ImportRule] = Field(default_factory=list)
  external_packages: List[ExternalPackageRule] = Field(default_factory=list)
  safe_external_packages: List[str] = Field(default_factory=list)

  def function_table(self) -> Dict[Tuple[str, str], FunctionRule]:
    """
    Flattens function rules into a lookup table.

    Returns:
        Dict: (import path, function name) -> rule. Earlier rules win.
    """
    return _flatten(self.function_calls)

  def external_table(self) -> Dict[Tuple[str, str], FunctionRule]:
    return _flatten(self.external_packages)

  def known_packages(self) -> List[str]:
    """Import paths that have at least one explicit rule."""
    seen: List[str] = []
    for rule in [*self.function_calls, *self.external_packages]:
      if rule.package not in seen:
        seen.append(rule.package)
    return seen

  def import_rule(self, path: str) -> Optional[ImportRule]:
    for rule in self.disallowed_imports:
      if rule.path == path:
        return rule
    return None


def _flatten(rules: List[FunctionRule]) -> Dict[Tuple[str, str], FunctionRule]:
  table: Dict[Tuple[str, str], FunctionRule] = {}
  for rule in rules:
    for func in rule.functions:
      table.setdefault((rule.package, func), rule)
  return table
