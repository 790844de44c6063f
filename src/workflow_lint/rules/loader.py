"""
Rule File Loading.

Reads YAML rule files into ``RuleSet`` models and locates the default rule
file shipped with the package.
"""

import sys
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from workflow_lint.errors import RulesError
from workflow_lint.rules.schema import RuleSet

if sys.version_info >= (3, 9):
  from importlib.resources import files
else:
  files = None

DEFAULT_RULES_FILENAME = "default_rules.yaml"


def resolve_default_rules() -> Path:
  """
  Locates the bundled ``default_rules.yaml``.

  Prioritizes the file next to this module (source checkouts and editable
  installs), then falls back to package resources.

  Returns:
      Path: The absolute path of the default rule file.
  """
  local_path = Path(__file__).parent / DEFAULT_RULES_FILENAME
  if local_path.exists():
    return local_path

  if files is not None:
    try:
      return Path(str(files("workflow_lint.rules") / DEFAULT_RULES_FILENAME))
    except (ModuleNotFoundError, TypeError):
      pass

  return local_path


def parse_rules(text: str, source: str = "<string>") -> RuleSet:
  """
  Parses YAML rule text.

  Args:
      text: YAML content.
      source: Name used in error messages.

  Returns:
      RuleSet: The validated rules. An empty document yields an empty RuleSet.

  Raises:
      RulesError: On YAML syntax errors or schema violations.
  """
  try:
    data = yaml.safe_load(text)
  except yaml.YAMLError as e:
    raise RulesError(f"Invalid YAML in {source}: {e}") from e

  if data is None:
    return RuleSet()
  if not isinstance(data, dict):
    raise RulesError(f"{source}: expected a mapping at the top level, got {type(data).__name__}")

  try:
    return RuleSet.model_validate(data)
  except ValidationError as e:
    raise RulesError(f"Rule validation failed for {source}: {e}") from e


def load_rules(path: Optional[Union[str, Path]] = None) -> RuleSet:
  """
  Loads a rule file from disk.

  Args:
      path: Rule file path. None loads the bundled defaults.

  Returns:
      RuleSet: The validated rules.

  Raises:
      RulesError: If the file is missing, unreadable or invalid.
  """
  rules_path = Path(path) if path is not None else resolve_default_rules()
  try:
    text = rules_path.read_text(encoding="utf-8")
  except OSError as e:
    raise RulesError(f"Cannot read rules file {rules_path}: {e}") from e
  return parse_rules(text, source=str(rules_path))
