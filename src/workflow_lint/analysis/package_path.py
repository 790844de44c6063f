"""
Package Path Resolution.

Computes the canonical Go package path of a source file, which prefixes every
qualified function name in the call graph. Resolution is an ordered chain of
strategies; the first one that matches wins:

1.  ``FixtureLayoutStrategy``: test fixtures laid out as
    ``.../testdata/mod/<pkg>/file.go`` get a synthetic module prefix.
2.  ``ManifestStrategy``: files under the ``go.mod`` root resolve to
    ``<module path>/<relative dir>``.
3.  ``ProjectRootStrategy``: a configured project root and module path,
    used when the tree being scanned has no manifest.
4.  ``DeclaredPackageStrategy``: the bare ``package`` clause name.

This graceful degradation lets the analyzer run on code that is not a
complete, buildable module.
"""

import logging
from pathlib import Path, PurePath
from typing import Dict, Mapping, Optional, Sequence, Tuple

from workflow_lint.analysis.manifest import ModuleInfo
from workflow_lint.analysis.parsing import ParsedFile

logger = logging.getLogger(__name__)


def join_import_path(prefix: str, relative: PurePath) -> str:
  """
  Appends a relative directory to an import path using ``/`` separators.

  Args:
      prefix: Module or package prefix.
      relative: Directory relative to the prefix's root.

  Returns:
      str: ``prefix`` alone for the root directory, else ``prefix/a/b``.
  """
  parts = [p for p in relative.parts if p not in ("", ".")]
  if not parts:
    return prefix
  return "/".join([prefix.rstrip("/"), *parts])


def _relative_dir(file_path: Path, root: Path) -> Optional[PurePath]:
  try:
    return file_path.parent.relative_to(root)
  except ValueError:
    return None


class PackagePathStrategy:
  """
  One step of the resolution chain.

  Subclasses return the package path, or None when they do not apply.
  """

  name = "base"

  def resolve(self, file_path: Path, parsed: ParsedFile) -> Optional[str]:
    raise NotImplementedError


class FixtureLayoutStrategy(PackagePathStrategy):
  """
  Synthesises package paths for multi-package test fixtures.

  A fixture root such as ``testdata/mod`` maps to a prefix such as
  ``example.com/linttest``; ``testdata/mod/app/workflow.go`` then resolves to
  ``example.com/linttest/app``.
  """

  name = "fixture"

  def __init__(self, fixture_roots: Mapping[str, str]):
    """
    Args:
        fixture_roots: Directory marker (POSIX, relative) -> synthetic prefix.
    """
    self.fixture_roots: Tuple[Tuple[Tuple[str, ...], str], ...] = tuple(
      (PurePath(marker).parts, prefix) for marker, prefix in fixture_roots.items() if marker
    )

  def resolve(self, file_path: Path, parsed: ParsedFile) -> Optional[str]:
    dir_parts = file_path.resolve().parent.parts
    for marker, prefix in self.fixture_roots:
      width = len(marker)
      # Right-most occurrence so nested checkouts resolve against the inner fixture.
      for start in range(len(dir_parts) - width, -1, -1):
        if dir_parts[start : start + width] == marker:
          return join_import_path(prefix, PurePath(*dir_parts[start + width :]))
    return None


class ManifestStrategy(PackagePathStrategy):
  """Resolves relative to the ``go.mod`` root directory."""

  name = "manifest"

  def __init__(self, module_info: Optional[ModuleInfo]):
    self.module_info = module_info
    self._root = module_info.root_dir.resolve() if module_info is not None else None

  def resolve(self, file_path: Path, parsed: ParsedFile) -> Optional[str]:
    if self.module_info is None or not self.module_info.module_path:
      return None
    relative = _relative_dir(file_path.resolve(), self._root)
    if relative is None:
      return None
    return join_import_path(self.module_info.module_path, relative)


class ProjectRootStrategy(PackagePathStrategy):
  """Resolves relative to a configured project root with a known module path."""

  name = "project-root"

  def __init__(self, project_root: Optional[Path], project_module: Optional[str]):
    self.project_root = project_root.resolve() if project_root is not None else None
    self.project_module = project_module

  def resolve(self, file_path: Path, parsed: ParsedFile) -> Optional[str]:
    if self.project_root is None or not self.project_module:
      return None
    relative = _relative_dir(file_path.resolve(), self.project_root)
    if relative is None:
      return None
    return join_import_path(self.project_module, relative)


class DeclaredPackageStrategy(PackagePathStrategy):
  """Last resort: the name from the ``package`` clause."""

  name = "declared"

  def resolve(self, file_path: Path, parsed: ParsedFile) -> Optional[str]:
    return parsed.package_name or None


class PackagePathResolver:
  """
  Runs the strategy chain and caches results per file.

  Resolution is idempotent: repeated calls for the same file return the same
  path as long as the resolver (and its manifest) is unchanged.
  """

  FALLBACK = "local"

  def __init__(self, strategies: Sequence[PackagePathStrategy]):
    self.strategies = list(strategies)
    self._cache: Dict[Path, str] = {}

  @classmethod
  def default(
    cls,
    module_info: Optional[ModuleInfo] = None,
    fixture_roots: Optional[Mapping[str, str]] = None,
    project_root: Optional[Path] = None,
    project_module: Optional[str] = None,
  ) -> "PackagePathResolver":
    """Builds the standard fixture -> manifest -> project -> declared chain."""
    return cls(
      [
        FixtureLayoutStrategy(fixture_roots or {}),
        ManifestStrategy(module_info),
        ProjectRootStrategy(project_root, project_module),
        DeclaredPackageStrategy(),
      ]
    )

  def resolve(self, file_path: Path, parsed: ParsedFile) -> str:
    """
    Computes the canonical package path for a file.

    Args:
        file_path: The source file location.
        parsed: The file's parse result (for the declared package name).

    Returns:
        str: The package path; ``local`` if nothing matched.
    """
    key = Path(file_path)
    cached = self._cache.get(key)
    if cached is not None:
      return cached

    result = self.FALLBACK
    for strategy in self.strategies:
      resolved = strategy.resolve(key, parsed)
      if resolved:
        logger.debug("%s -> %s (%s)", key, resolved, strategy.name)
        result = resolved
        break

    self._cache[key] = result
    return result
