"""
Exception hierarchy for workflow-lint.

Input errors (missing manifest, unreadable file, unparsable source, broken
rule files) are raised at module boundaries. The scanner catches them per
file so one bad input does not abort the whole corpus; the CLI turns the
remaining ones into a non-zero exit code.
"""


class WorkflowLintError(Exception):
  """Base class for all errors raised by workflow-lint."""


class ManifestNotFoundError(WorkflowLintError):
  """No ``go.mod`` could be located or opened."""


class ManifestError(WorkflowLintError):
  """The ``go.mod`` file exists but could not be read."""


class SourceParseError(WorkflowLintError):
  """
  A Go source file could not be turned into a usable syntax tree.

  Attributes:
      path: The file that failed to parse.
      line: 1-based line of the first syntax error, if known.
  """

  def __init__(self, path: str, message: str, line: int = 0):
    super().__init__(f"{path}: {message}")
    self.path = path
    self.line = line


class RulesError(WorkflowLintError):
  """The rules YAML file is missing or does not match the rule schema."""
