"""
Detector Base Class.

Detectors are consumers of the analysis core. Each one looks for a syntactic
pattern inside a file and, before reporting, asks the ``WorkflowRegistry``
whether the enclosing function is exercised by a workflow. Findings in
activities and in helpers no workflow calls are suppressed.
"""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Tuple

from tree_sitter import Node

from workflow_lint.analysis.callgraph import canonical
from workflow_lint.analysis.parsing import FunctionDecl, position
from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.enums import Severity
from workflow_lint.models import FileRecord, Issue


class Detector(ABC):
  """
  Abstract base for all violation detectors.

  Subclasses implement ``detect``; helpers here cover the common steps of
  iterating workflow-reachable functions and building positioned issues.
  """

  name = "detector"

  @abstractmethod
  def detect(self, record: FileRecord, registry: WorkflowRegistry) -> List[Issue]:
    """
    Scans one file.

    Args:
        record: The file's pass-1 record.
        registry: The completed registry (read-only).

    Returns:
        List[Issue]: Findings for this file.
    """

  @staticmethod
  def reachable_functions(record: FileRecord, registry: WorkflowRegistry) -> Iterator[Tuple[FunctionDecl, str]]:
    """
    Yields ``(declaration, qualified name)`` for functions with a body that a
    workflow can reach.
    """
    for decl in record.tree.functions:
      if decl.body is None:
        continue
      qualified = canonical(record.package_path, decl.local_name)
      if registry.is_workflow_reachable(qualified):
        yield decl, qualified

  @staticmethod
  def make_issue(
    record: FileRecord,
    node: Node,
    rule: str,
    severity: Severity,
    message: str,
    func: str = "",
    call_stack: Optional[List[str]] = None,
  ) -> Issue:
    line, column = position(node)
    return Issue(
      file=str(record.path),
      line=line,
      column=column,
      rule=rule,
      severity=severity,
      message=message,
      func=func,
      call_stack=list(call_stack or []),
    )
