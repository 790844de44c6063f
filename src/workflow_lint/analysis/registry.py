"""
Workflow Registry: Classification Store and Reachability Engine.

The registry is the single shared piece of state of a scan. It is filled
during pass 1 (additive, order-independent unions of classifications and
call edges) and only queried during pass 2.

Reachability
------------
A function is *workflow-reachable* if it is a workflow entry point itself,
or if it can be reached by following call edges from some workflow entry
point without ever stepping *into* an activity. Activity subtrees are pruned
at the entering edge only: a helper that is called from an activity and also
from a workflow through a different path is still reachable.

The search is a multi-source breadth-first traversal seeded from every
workflow node (in sorted order) with an explicit visited set, so cycles
terminate and the reconstructed call path is a shortest one. For a fixed
graph the same path is produced on every run.

Conflicting classification
--------------------------
A function recorded as both workflow and activity is treated as a workflow:
it seeds the search and is never pruned. Both memberships stay visible
through ``is_workflow`` / ``is_activity``.

No query raises. An empty registry answers False / ``[]`` everywhere.
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from workflow_lint.analysis.callgraph import Edge
from workflow_lint.analysis.classifier import Classification

logger = logging.getLogger(__name__)


class WorkflowRegistry:
  """
  Aggregates classifications and the global call graph across all files.

  Attributes:
      workflow_functions: Qualified names of workflow entry points.
      activity_functions: Qualified names of activity entry points.
      call_graph: caller -> callees in insertion order (duplicates allowed).
  """

  def __init__(self) -> None:
    self.workflow_functions: Set[str] = set()
    self.activity_functions: Set[str] = set()
    self.call_graph: Dict[str, List[str]] = {}
    # BFS parent map over the whole graph; None until first query.
    self._parents: Optional[Dict[str, Optional[str]]] = None

  # --- Mutators (pass 1) ---

  def mark_workflow(self, name: str) -> None:
    self.workflow_functions.add(name)
    self._parents = None

  def mark_activity(self, name: str) -> None:
    self.activity_functions.add(name)
    self._parents = None

  def add_edge(self, caller: str, callee: str) -> None:
    self.call_graph.setdefault(caller, []).append(callee)
    self._parents = None

  def add_edges(self, edges: Iterable[Edge]) -> None:
    """
    Appends call edges to the graph.

    Args:
        edges: ``(caller, callee)`` pairs; order is preserved per caller.
    """
    for caller, callee in edges:
      self.call_graph.setdefault(caller, []).append(callee)
    self._parents = None

  def apply(self, classification: Classification) -> None:
    """Records one file's classification results."""
    self.workflow_functions.update(classification.workflows)
    self.activity_functions.update(classification.activities)
    self._parents = None

  def merge(self, other: "WorkflowRegistry") -> None:
    """
    Unions another registry into this one.

    Useful when per-file results are collected independently and combined
    afterwards on a single thread.
    """
    self.workflow_functions |= other.workflow_functions
    self.activity_functions |= other.activity_functions
    for caller, callees in other.call_graph.items():
      self.call_graph.setdefault(caller, []).extend(callees)
    self._parents = None

  # --- Queries (pass 2) ---

  def is_workflow(self, name: str) -> bool:
    return name in self.workflow_functions

  def is_activity(self, name: str) -> bool:
    return name in self.activity_functions

  def callees(self, name: str) -> List[str]:
    """Outbound edges of ``name`` (a copy; empty for unknown names)."""
    return list(self.call_graph.get(name, ()))

  def is_workflow_reachable(self, name: str) -> bool:
    """
    Checks whether ``name`` is exercised by some workflow's control flow.

    Args:
        name: Qualified function name.

    Returns:
        bool: True for workflow entry points and for functions reachable from
        one without entering an activity.
    """
    if name in self.workflow_functions:
      return True
    return name in self._reachability()

  def call_path_to(self, name: str) -> List[str]:
    """
    Reconstructs a shortest call path from a workflow entry point.

    Args:
        name: Qualified function name.

    Returns:
        List[str]: ``[workflow, ..., name]``, or an empty list if ``name`` is
        not workflow-reachable.
    """
    parents = self._reachability()
    if name not in parents:
      return []

    path: List[str] = []
    current: Optional[str] = name
    while current is not None:
      path.append(current)
      current = parents[current]
    path.reverse()
    return path

  def reachable_functions(self) -> Set[str]:
    """All workflow-reachable qualified names."""
    return set(self._reachability())

  def summary(self) -> Dict[str, int]:
    return {
      "workflows": len(self.workflow_functions),
      "activities": len(self.activity_functions),
      "callers": len(self.call_graph),
      "edges": sum(len(v) for v in self.call_graph.values()),
    }

  # --- Internals ---

  def _enterable(self, name: str) -> bool:
    return name not in self.activity_functions or name in self.workflow_functions

  def _reachability(self) -> Dict[str, Optional[str]]:
    """
    Runs (or returns the cached) multi-source BFS.

    Returns:
        Dict[str, Optional[str]]: reached node -> BFS parent (None for seeds).
    """
    if self._parents is not None:
      return self._parents

    seeds = sorted(self.workflow_functions)
    parents: Dict[str, Optional[str]] = {seed: None for seed in seeds}
    queue = deque(seeds)

    while queue:
      current = queue.popleft()
      for callee in self.call_graph.get(current, ()):
        if callee in parents or not self._enterable(callee):
          continue
        parents[callee] = current
        queue.append(callee)

    logger.debug("Reachability computed: %d of %d callers reachable", len(parents), len(self.call_graph))
    self._parents = parents
    return parents
