"""
Call Graph Extraction.

Turns one parsed file into canonical call edges ``(caller, callee)``, where
both ends are qualified names of the form ``<package path>.<function>``.

Two call shapes are recognised:

*   ``foo(...)``: a same-package call, canonicalised as ``<pkg>.foo``.
*   ``alias.Foo(...)``: the alias is resolved through the file's import alias
    table; if it is not an import (e.g. a local variable, or a stdlib package
    referenced without an explicit import entry) the alias text itself is used.

Calls made through function values, interface methods or higher-order
parameters are invisible to this purely syntactic pass.
"""

from typing import Dict, List, NamedTuple, Optional

from tree_sitter import Node

from workflow_lint.analysis.parsing import ParsedFile, node_text, walk

LOCAL_PACKAGE = "local"


class Edge(NamedTuple):
  """A directed call edge between two qualified names."""

  caller: str
  callee: str


def canonical(package_path: str, func_name: str) -> str:
  """
  Builds a qualified name.

  Args:
      package_path: Package or import path (e.g. ``github.com/me/proj/pkg``).
      func_name: Function name, or ``Type.Method`` for methods.

  Returns:
      str: ``<package_path>.<func_name>``; an empty path becomes ``local``.
  """
  path = package_path.strip() or LOCAL_PACKAGE
  return f"{path}.{func_name}"


def resolve_callee(function: Node, package_path: str, import_aliases: Dict[str, str]) -> Optional[str]:
  """
  Canonicalises the ``function`` part of a call expression.

  Args:
      function: The call's ``function`` field node.
      package_path: Package path of the calling file.
      import_aliases: The calling file's alias -> import path table.

  Returns:
      The qualified callee name, or None for shapes the graph does not track
      (function literals, indexed or chained expressions).
  """
  if function.type == "identifier":
    return canonical(package_path, node_text(function))

  if function.type == "selector_expression":
    operand = function.child_by_field_name("operand")
    field = function.child_by_field_name("field")
    if operand is None or field is None or operand.type != "identifier":
      return None
    alias = node_text(operand)
    import_path = import_aliases.get(alias) or alias
    return canonical(import_path, node_text(field))

  return None


def build_edges(parsed: ParsedFile, package_path: str, import_aliases: Dict[str, str]) -> List[Edge]:
  """
  Extracts call edges from every function and method declaration in a file.

  Calls inside nested function literals are attributed to the enclosing
  declaration. Duplicate edges are kept; multiplicity does not matter for
  reachability.

  Args:
      parsed: The parsed file.
      package_path: The file's resolved package path.
      import_aliases: The file's import alias table.

  Returns:
      List[Edge]: Edges in source order.
  """
  edges: List[Edge] = []
  for decl in parsed.functions:
    body = decl.body
    if body is None:
      continue
    caller = canonical(package_path, decl.local_name)
    for node in walk(body):
      if node.type != "call_expression":
        continue
      function = node.child_by_field_name("function")
      if function is None:
        continue
      callee = resolve_callee(function, package_path, import_aliases)
      if callee is not None:
        edges.append(Edge(caller, callee))
  return edges
