"""
Workflow / Activity Function Classification.

Decides which functions are workflow entry points and which are activity
entry points. Two kinds of evidence are used:

1.  **Signatures**: a parameter whose type matches a configured marker type.
    By default ``workflow.Context`` marks a workflow and the plain
    cancellation context ``context.Context`` marks an activity.
2.  **Registrations**: functions handed to the SDK's registration calls
    (``workflow.Register(fn)``, ``w.RegisterActivity(fn)``, ...) are
    classified the same way even when their signature carries no marker,
    which covers factory and registration indirection.

Marker types are matched structurally against the parsed type expression:
the qualifier may be written as the import alias, the full import path's last
segment, or the import path itself.

Conflicting evidence is not resolved here; a function may be reported as
both kinds.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from pydantic import BaseModel, Field
from tree_sitter import Node

from workflow_lint.analysis.callgraph import canonical
from workflow_lint.analysis.parsing import FunctionDecl, ParsedFile, node_text, walk
from workflow_lint.enums import FunctionKind


class MarkerType(BaseModel):
  """
  A parameter type that marks a function's role, e.g. ``workflow.Context``.
  """

  package: str = Field(..., description="Package qualifier: alias, last import path segment, or full import path.")
  name: str = Field(..., description="Type name, e.g. 'Context'.")

  @classmethod
  def parse(cls, text: str) -> "MarkerType":
    """Parses ``pkg.Type`` (the package part may itself contain dots and slashes)."""
    package, _, name = text.rpartition(".")
    return cls(package=package, name=name)

  def __str__(self) -> str:
    return f"{self.package}.{self.name}"


class RegistrationCall(BaseModel):
  """
  Describes an SDK call that registers a function as a workflow or activity.
  """

  kind: FunctionKind
  name: str = Field(..., description="Called function or method name, e.g. 'RegisterActivity'.")
  package: Optional[str] = Field(
    None,
    description="Required qualifier (alias or import path). None matches any receiver, including worker values.",
  )
  arity: Optional[int] = Field(None, description="Required argument count. None matches any.")
  argument: int = Field(0, description="Index of the argument holding the registered function.")


DEFAULT_WORKFLOW_MARKERS: List[MarkerType] = [MarkerType(package="workflow", name="Context")]
DEFAULT_ACTIVITY_MARKERS: List[MarkerType] = [MarkerType(package="context", name="Context")]

DEFAULT_REGISTRATIONS: List[RegistrationCall] = [
  RegistrationCall(kind=FunctionKind.WORKFLOW, name="Register", package="workflow", arity=1, argument=0),
  RegistrationCall(kind=FunctionKind.WORKFLOW, name="RegisterWithOptions", package="workflow", arity=2, argument=0),
  RegistrationCall(kind=FunctionKind.WORKFLOW, name="RegisterWorkflow", arity=1, argument=0),
  RegistrationCall(kind=FunctionKind.WORKFLOW, name="RegisterWorkflow", arity=2, argument=1),
  RegistrationCall(kind=FunctionKind.WORKFLOW, name="RegisterWorkflowWithOptions", arity=2, argument=0),
  RegistrationCall(kind=FunctionKind.ACTIVITY, name="Register", package="activity", arity=1, argument=0),
  RegistrationCall(kind=FunctionKind.ACTIVITY, name="RegisterWithOptions", package="activity", arity=2, argument=0),
  RegistrationCall(kind=FunctionKind.ACTIVITY, name="RegisterActivity", arity=1, argument=0),
  RegistrationCall(kind=FunctionKind.ACTIVITY, name="RegisterActivity", arity=2, argument=1),
  RegistrationCall(kind=FunctionKind.ACTIVITY, name="RegisterActivityWithOptions", arity=2, argument=0),
]


@dataclass
class Classification:
  """Qualified names found to be workflows / activities in one file."""

  workflows: Set[str] = field(default_factory=set)
  activities: Set[str] = field(default_factory=set)

  def add(self, kind: FunctionKind, name: str) -> None:
    if kind is FunctionKind.WORKFLOW:
      self.workflows.add(name)
    else:
      self.activities.add(name)


def _qualifier_matches(qualifier: str, expected: str, import_aliases: Dict[str, str]) -> bool:
  if qualifier == expected:
    return True
  import_path = import_aliases.get(qualifier)
  if import_path is None:
    return False
  return import_path == expected or import_path.rsplit("/", 1)[-1] == expected


class FunctionClassifier:
  """
  Extracts workflow/activity classifications from a parsed file.
  """

  def __init__(
    self,
    workflow_markers: Optional[Sequence[MarkerType]] = None,
    activity_markers: Optional[Sequence[MarkerType]] = None,
    registrations: Optional[Sequence[RegistrationCall]] = None,
  ):
    self.workflow_markers = list(DEFAULT_WORKFLOW_MARKERS if workflow_markers is None else workflow_markers)
    self.activity_markers = list(DEFAULT_ACTIVITY_MARKERS if activity_markers is None else activity_markers)
    self.registrations = list(DEFAULT_REGISTRATIONS if registrations is None else registrations)

  def classify(self, parsed: ParsedFile, package_path: str, import_aliases: Dict[str, str]) -> Classification:
    """
    Classifies the functions of one file.

    Args:
        parsed: The parsed file.
        package_path: The file's resolved package path.
        import_aliases: The file's import alias table.

    Returns:
        Classification: Qualified names of workflow and activity functions.
        Registration calls may name functions declared in other files or
        packages; those names are included as well.
    """
    result = Classification()

    for decl in parsed.functions:
      name = canonical(package_path, decl.local_name)
      kinds = self.signature_kinds(decl, import_aliases)
      for kind in kinds:
        result.add(kind, name)

    for node in walk(parsed.root):
      if node.type == "call_expression":
        self._classify_registration(node, package_path, import_aliases, result)

    return result

  def signature_kinds(self, decl: FunctionDecl, import_aliases: Dict[str, str]) -> List[FunctionKind]:
    """
    Determines roles implied by a declaration's parameter types.

    Args:
        decl: The function or method declaration.
        import_aliases: The file's import alias table.

    Returns:
        List[FunctionKind]: Zero, one or both kinds.
    """
    kinds: List[FunctionKind] = []
    for param in decl.parameters:
      type_node = param.child_by_field_name("type")
      if self._matches_any(type_node, self.workflow_markers, import_aliases):
        if FunctionKind.WORKFLOW not in kinds:
          kinds.append(FunctionKind.WORKFLOW)
      elif self._matches_any(type_node, self.activity_markers, import_aliases):
        if FunctionKind.ACTIVITY not in kinds:
          kinds.append(FunctionKind.ACTIVITY)
    return kinds

  def _matches_any(self, type_node: Optional[Node], markers: Sequence[MarkerType], import_aliases: Dict[str, str]) -> bool:
    while type_node is not None and type_node.type in ("pointer_type", "parenthesized_type"):
      type_node = type_node.named_children[0] if type_node.named_children else None
    if type_node is None or type_node.type != "qualified_type":
      return False

    qualifier = node_text(type_node.child_by_field_name("package"))
    type_name = node_text(type_node.child_by_field_name("name"))
    for marker in markers:
      if marker.name == type_name and _qualifier_matches(qualifier, marker.package, import_aliases):
        return True
    return False

  def _classify_registration(
    self,
    call: Node,
    package_path: str,
    import_aliases: Dict[str, str],
    result: Classification,
  ) -> None:
    function = call.child_by_field_name("function")
    arguments = call.child_by_field_name("arguments")
    if function is None or arguments is None:
      return

    if function.type == "selector_expression":
      operand = function.child_by_field_name("operand")
      qualifier = node_text(operand) if operand is not None and operand.type == "identifier" else None
      called = node_text(function.child_by_field_name("field"))
    elif function.type == "identifier":
      qualifier = None
      called = node_text(function)
    else:
      return

    args = [a for a in arguments.named_children if a.type != "comment"]
    for reg in self.registrations:
      if reg.name != called:
        continue
      if reg.arity is not None and reg.arity != len(args):
        continue
      if reg.package is not None and (qualifier is None or not _qualifier_matches(qualifier, reg.package, import_aliases)):
        continue
      if reg.argument >= len(args):
        continue
      target = self._function_reference(args[reg.argument], package_path, import_aliases)
      if target is not None:
        result.add(reg.kind, target)

  @staticmethod
  def _function_reference(arg: Node, package_path: str, import_aliases: Dict[str, str]) -> Optional[str]:
    """Canonical name of ``fn`` or ``pkg.Fn`` arguments; None for other expressions."""
    if arg.type == "identifier":
      return canonical(package_path, node_text(arg))
    if arg.type == "selector_expression":
      operand = arg.child_by_field_name("operand")
      field_node = arg.child_by_field_name("field")
      if operand is not None and operand.type == "identifier" and field_node is not None:
        alias = node_text(operand)
        return canonical(import_aliases.get(alias, alias), node_text(field_node))
    return None
