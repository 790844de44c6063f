"""
Go Source Parsing via tree-sitter.

The analyzer treats the parser as a black box that produces syntax trees with
position information. This module wraps the tree-sitter Go grammar and
pre-extracts the handful of structures every later stage needs:

*   the ``package`` clause name,
*   import specs (path + optional explicit alias),
*   top-level function and method declarations.

Node helpers (``node_text``, ``position``, ``walk``) keep tree-sitter details
out of the call-graph builder, the classifier and the detectors.
"""

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import tree_sitter_go
from tree_sitter import Language, Node, Parser, Tree

from workflow_lint.errors import SourceParseError

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

# Imports that never introduce a usable alias.
_BLANK_ALIAS = "_"
_DOT_ALIAS = "."

_FUNCTION_NODES = ("function_declaration", "method_declaration")

_MAJOR_VERSION = re.compile(r"^v[0-9]+$")
_GOPKG_VERSION = re.compile(r"\.v[0-9]+$")


@dataclass(frozen=True)
class ImportSpec:
  """
  One entry of an ``import`` declaration.

  Attributes:
      path: The unquoted import path (e.g. ``math/rand``).
      alias: Explicit alias text (``mysterylib``, ``_`` or ``.``), or None.
      node: The ``import_spec`` node (for positions).
  """

  path: str
  alias: Optional[str]
  node: Node = field(compare=False, repr=False)

  @property
  def default_alias(self) -> str:
    """
    The name a file refers to the package by when no alias is written.

    Follows the conventional package naming of the import path: the last
    segment, skipping a trailing major version (``redis/v8`` -> ``redis``),
    without a ``go-`` prefix or a ``.vN`` suffix (``gopkg.in/yaml.v3`` -> ``yaml``).
    """
    segments = self.path.split("/")
    name = segments[-1]
    if len(segments) > 1 and _MAJOR_VERSION.match(name):
      name = segments[-2]
    name = _GOPKG_VERSION.sub("", name)
    if name.startswith("go-") and len(name) > 3:
      name = name[3:]
    return name


@dataclass(frozen=True)
class FunctionDecl:
  """
  A top-level function or method declaration.

  Attributes:
      name: The declared identifier.
      receiver: Receiver type name for methods (pointer stripped), else None.
      node: The declaration node.
  """

  name: str
  receiver: Optional[str]
  node: Node = field(compare=False, repr=False)

  @property
  def local_name(self) -> str:
    """Name used inside the package namespace (``Type.Method`` for methods)."""
    if self.receiver:
      return f"{self.receiver}.{self.name}"
    return self.name

  @property
  def body(self) -> Optional[Node]:
    return self.node.child_by_field_name("body")

  @property
  def parameters(self) -> List[Node]:
    """``parameter_declaration`` / ``variadic_parameter_declaration`` nodes."""
    params = self.node.child_by_field_name("parameters")
    if params is None:
      return []
    return [p for p in params.named_children if p.type in ("parameter_declaration", "variadic_parameter_declaration")]


@dataclass
class ParsedFile:
  """
  A parsed Go file plus the structures extracted from it.

  Attributes:
      path: Source file path.
      source: Raw file bytes (tree-sitter positions index into these).
      tree: The tree-sitter tree.
      package_name: Name from the ``package`` clause (empty if missing).
      imports: Import specs in source order.
      functions: Top-level function/method declarations in source order.
  """

  path: Path
  source: bytes
  tree: Tree
  package_name: str = ""
  imports: List[ImportSpec] = field(default_factory=list)
  functions: List[FunctionDecl] = field(default_factory=list)

  @property
  def root(self) -> Node:
    return self.tree.root_node


def node_text(node: Optional[Node]) -> str:
  """
  Decodes the source text covered by a node.

  Args:
      node: A tree-sitter node (None yields an empty string).

  Returns:
      str: The UTF-8 text of the node.
  """
  if node is None or node.text is None:
    return ""
  return node.text.decode("utf-8", errors="replace")


def position(node: Node) -> Tuple[int, int]:
  """1-based (line, column) of a node's start, matching Go tooling."""
  row, column = node.start_point
  return row + 1, column + 1


def walk(node: Node) -> Iterator[Node]:
  """
  Pre-order traversal of a subtree, including ``node`` itself.

  Uses an explicit stack so deeply nested code cannot exhaust recursion.
  """
  stack = [node]
  while stack:
    current = stack.pop()
    yield current
    stack.extend(reversed(current.children))


def unquote(literal: str) -> str:
  """Strips the quotes of an interpreted or raw Go string literal."""
  if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in ('"', "`"):
    return literal[1:-1]
  return literal


def build_import_aliases(imports: List[ImportSpec]) -> Dict[str, str]:
  """
  Builds the per-file import alias table.

  An explicit alias wins; otherwise ``ImportSpec.default_alias`` is used
  (normally the last ``/`` segment). Blank (``_``) and dot (``.``) imports introduce no alias.

  Args:
      imports: The file's import specs.

  Returns:
      Dict[str, str]: alias -> import path.
  """
  aliases: Dict[str, str] = {}
  for spec in imports:
    if spec.alias in (_BLANK_ALIAS, _DOT_ALIAS):
      continue
    alias = spec.alias or spec.default_alias
    aliases[alias] = spec.path
  return aliases


class GoSourceParser:
  """
  Thread-safe facade over a tree-sitter Go parser.

  tree-sitter ``Parser`` objects must not be shared between threads, so one is
  created lazily per thread.
  """

  def __init__(self) -> None:
    self._local = threading.local()

  def _parser(self) -> Parser:
    parser = getattr(self._local, "parser", None)
    if parser is None:
      parser = Parser(GO_LANGUAGE)
      self._local.parser = parser
    return parser

  def parse(self, source: Union[bytes, str], path: Union[str, Path] = "<memory>") -> ParsedFile:
    """
    Parses Go source into a ParsedFile.

    Args:
        source: File content.
        path: File path recorded in the result and in errors.

    Returns:
        ParsedFile: The tree and extracted declarations.

    Raises:
        SourceParseError: If the source contains syntax errors.
    """
    if isinstance(source, str):
      source = source.encode("utf-8")

    tree = self._parser().parse(source)
    root = tree.root_node
    if root.has_error:
      line = _first_error_line(root)
      raise SourceParseError(str(path), f"syntax error near line {line}", line=line)

    parsed = ParsedFile(path=Path(path), source=source, tree=tree)
    for child in root.named_children:
      if child.type == "package_clause":
        parsed.package_name = _package_name(child)
      elif child.type == "import_declaration":
        parsed.imports.extend(_import_specs(child))
      elif child.type in _FUNCTION_NODES:
        decl = _function_decl(child)
        if decl is not None:
          parsed.functions.append(decl)
    return parsed

  def parse_file(self, path: Union[str, Path]) -> ParsedFile:
    """
    Reads and parses a file from disk.

    Raises:
        OSError: If the file cannot be read.
        SourceParseError: If the source contains syntax errors.
    """
    path = Path(path)
    return self.parse(path.read_bytes(), path)


def _first_error_line(root: Node) -> int:
  for node in walk(root):
    if node.type == "ERROR" or node.is_missing:
      return position(node)[0]
  return 0


def _package_name(clause: Node) -> str:
  for child in clause.named_children:
    if child.type == "package_identifier":
      return node_text(child)
  return ""


def _import_specs(declaration: Node) -> List[ImportSpec]:
  specs = []
  for node in walk(declaration):
    if node.type != "import_spec":
      continue
    path_node = node.child_by_field_name("path")
    name_node = node.child_by_field_name("name")
    if path_node is None:
      continue
    alias = node_text(name_node) if name_node is not None else None
    specs.append(ImportSpec(path=unquote(node_text(path_node)), alias=alias, node=node))
  return specs


def _function_decl(node: Node) -> Optional[FunctionDecl]:
  name_node = node.child_by_field_name("name")
  if name_node is None:
    return None
  receiver = None
  if node.type == "method_declaration":
    receiver = _receiver_type(node.child_by_field_name("receiver"))
  return FunctionDecl(name=node_text(name_node), receiver=receiver, node=node)


def _receiver_type(receiver: Optional[Node]) -> Optional[str]:
  """Extracts ``T`` from receivers like ``(t T)``, ``(t *T)`` or ``(t *T[K])``."""
  if receiver is None:
    return None
  for param in receiver.named_children:
    if param.type != "parameter_declaration":
      continue
    type_node = param.child_by_field_name("type")
    while type_node is not None and type_node.type in ("pointer_type", "generic_type", "parenthesized_type"):
      if type_node.type == "generic_type":
        type_node = type_node.child_by_field_name("type")
      else:
        type_node = type_node.named_children[0] if type_node.named_children else None
    if type_node is not None and type_node.type == "type_identifier":
      return node_text(type_node)
  return None
