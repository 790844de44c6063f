"""
Data structures shared by the scanner, the detectors and the reporters.

This module defines the `Issue` Pydantic model (a single finding), the
`FileRecord` produced for every successfully parsed file in pass 1, and the
`ScanResult` returned by a complete scan.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from workflow_lint.analysis.parsing import ParsedFile
from workflow_lint.enums import Severity


class Issue(BaseModel):
  """
  A single determinism finding.
  """

  file: str = Field(..., description="Path of the offending file.")
  line: int = Field(..., description="1-based line.")
  column: int = Field(..., description="1-based byte column.")
  rule: str = Field(..., description="Rule identifier, e.g. 'TimeUsage'.")
  severity: Severity = Field(Severity.ERROR)
  message: str = Field("")
  func: str = Field("", description="Enclosing function (Type.Method for methods).")
  call_stack: List[str] = Field(
    default_factory=list,
    description="Shortest call path from a workflow entry point to the enclosing function.",
  )

  def sort_key(self):
    return (self.file, self.line, self.column, self.rule, self.message)

  def to_dict(self) -> Dict[str, Any]:
    """Serialisable form; empty optional fields are dropped."""
    data = self.model_dump(mode="json")
    if not data["call_stack"]:
      del data["call_stack"]
    if not data["func"]:
      del data["func"]
    return data


@dataclass(frozen=True)
class FileRecord:
  """
  Everything pass 1 learned about one file; read-only afterwards.

  Attributes:
      path: The file path.
      tree: The parsed file.
      import_aliases: alias -> import path.
      package_path: The resolved canonical package path.
  """

  path: Path
  tree: ParsedFile
  import_aliases: Dict[str, str]
  package_path: str


class ScanFailure(BaseModel):
  """A file that could not be read or parsed and was skipped."""

  file: str
  error: str
  line: int = 0


class ScanResult(BaseModel):
  """
  Output of a full two-pass scan.
  """

  issues: List[Issue] = Field(default_factory=list)
  failures: List[ScanFailure] = Field(default_factory=list)
  files_scanned: int = 0

  @property
  def has_failures(self) -> bool:
    return len(self.failures) > 0

  def issues_at_least(self, severity: Severity) -> List[Issue]:
    """Issues whose severity is at or above ``severity``."""
    return [i for i in self.issues if i.severity.rank >= severity.rank]
