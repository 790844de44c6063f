"""
Import Path Classification.

Decides what kind of package an import path refers to, using a hybrid of
authoritative ``go.mod`` data and heuristics:

1.  **Standard library**: first path element has no dot (``time``,
    ``math/rand``), or the path lives under ``golang.org/x/``.
2.  **Internal**: covered by the module path (manifest), or by one of the
    configured heuristic prefixes when no manifest is available.
3.  **Replaced**: redirected by a ``replace`` directive. Local directory
    replacements count as project code.
4.  **Framework / Safe**: the workflow SDK itself and vetted libraries.
5.  **Third party**: everything else.
"""

from typing import Iterable, Optional, Sequence

from workflow_lint.analysis.manifest import ModuleInfo
from workflow_lint.enums import ImportKind

STDLIB_EXTENSION_PREFIX = "golang.org/x/"

DEFAULT_FRAMEWORK_PACKAGES = ("go.uber.org/cadence", "go.temporal.io/sdk")

# Multi-package fixtures under testdata/ import each other through these.
DEFAULT_INTERNAL_PREFIXES = ("testdata", "example.com/linttest")


def is_stdlib(import_path: str) -> bool:
  """
  Heuristic standard library check.

  Args:
      import_path: A Go import path.

  Returns:
      True for standard library and ``golang.org/x`` packages.
  """
  if import_path.startswith(STDLIB_EXTENSION_PREFIX):
    return True
  first = import_path.split("/", 1)[0]
  return "." not in first


def has_path_prefix(import_path: str, prefixes: Iterable[str]) -> bool:
  """True if ``import_path`` equals, or is ``/``-nested under, any prefix."""
  for prefix in prefixes:
    prefix = prefix.rstrip("/")
    if import_path == prefix or import_path.startswith(prefix + "/"):
      return True
  return False


class ImportClassifier:
  """
  Classifies import paths for detectors.

  Attributes:
      module_info: Parsed ``go.mod`` data, or None in heuristic mode.
      internal_prefixes: Import path prefixes treated as project code when the
          manifest does not say otherwise.
      framework_packages: Workflow SDK packages (always considered safe).
      safe_packages: Vetted third-party packages.
  """

  def __init__(
    self,
    module_info: Optional[ModuleInfo] = None,
    internal_prefixes: Sequence[str] = DEFAULT_INTERNAL_PREFIXES,
    framework_packages: Sequence[str] = DEFAULT_FRAMEWORK_PACKAGES,
    safe_packages: Sequence[str] = (),
  ):
    self.module_info = module_info
    self.internal_prefixes = tuple(internal_prefixes)
    self.framework_packages = tuple(framework_packages)
    self.safe_packages = tuple(safe_packages)

  def classify(self, import_path: str) -> ImportKind:
    """
    Determines the kind of an import path.

    Args:
        import_path: The resolved import path.

    Returns:
        ImportKind: The classification. Manifest data takes precedence over
        heuristics; the standard library check runs last so that a module
        path without a dot (``module myapp``) is still recognised as internal.
    """
    info = self.module_info
    if info is not None:
      if info.is_internal(import_path):
        return ImportKind.INTERNAL
      replacement = info.replacement_for(import_path)
      if replacement is not None:
        return ImportKind.REPLACED_LOCAL if replacement.is_local else ImportKind.REPLACED

    if has_path_prefix(import_path, self.internal_prefixes):
      return ImportKind.INTERNAL
    if has_path_prefix(import_path, self.framework_packages):
      return ImportKind.FRAMEWORK
    if has_path_prefix(import_path, self.safe_packages):
      return ImportKind.SAFE
    if is_stdlib(import_path):
      return ImportKind.STDLIB
    return ImportKind.THIRD_PARTY

  def is_internal(self, import_path: str) -> bool:
    """True for project code, including local directory replacements."""
    return self.classify(import_path) in (ImportKind.INTERNAL, ImportKind.REPLACED_LOCAL)

  def is_safe(self, import_path: str) -> bool:
    return self.classify(import_path) in (ImportKind.FRAMEWORK, ImportKind.SAFE)

  def is_undeclared(self, import_path: str) -> bool:
    """
    True if a manifest is loaded, the path is third party, and no ``require``
    directive covers it. Always False in heuristic mode.
    """
    info = self.module_info
    if info is None or self.classify(import_path) is not ImportKind.THIRD_PARTY:
      return False
    return info.requirement_for(import_path) is None

  def is_unknown_external(self, import_path: str, known_packages: Iterable[str] = ()) -> bool:
    """
    Checks for an unvetted third-party package.

    Args:
        import_path: The resolved import path.
        known_packages: Packages that already have explicit rules.

    Returns:
        True if the path is third party (or replaced by another remote module)
        and neither safe, internal, nor covered by a rule.
    """
    if import_path in set(known_packages):
      return False
    return self.classify(import_path) in (ImportKind.THIRD_PARTY, ImportKind.REPLACED)
