"""
Go Module Manifest (``go.mod``) Resolution.

This module reads the project's ``go.mod`` file and answers two questions
that the rest of the analyzer needs:

1.  **Canonical naming**: What is the module path? Package paths of files
    inside the module are derived from it (see ``package_path``).
2.  **Import classification**: Is an import path part of this module, and
    has it been redirected by a ``replace`` directive?

The parser is deliberately best-effort rather than a full grammar. It
understands:

*   ``module <path>`` and ``go <version>`` declarations.
*   ``require`` and ``replace`` directives, either on a single line or inside
    a parenthesised block.
*   Full-line ``//`` comments and blank lines (skipped).
*   A trailing comment containing ``indirect`` on a requirement line.

Lines that do not fit the expected shape are skipped silently.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from workflow_lint.errors import ManifestError, ManifestNotFoundError

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "go.mod"

_COMMENT = "//"
_ARROW = "=>"


@dataclass(frozen=True)
class RequireDirective:
  """A single ``require`` entry."""

  path: str
  version: str
  indirect: bool = False


@dataclass(frozen=True)
class ReplaceDirective:
  """
  A single ``replace`` entry: ``old [oldVersion] => new [newVersion]``.

  Versions are empty strings when not given (always the case for local
  filesystem replacements).
  """

  old_path: str
  old_version: str
  new_path: str
  new_version: str

  @property
  def is_local(self) -> bool:
    """True if the replacement points at a directory rather than a module."""
    return _is_local_path(self.new_path)


@dataclass(frozen=True)
class ModuleInfo:
  """
  Parsed contents of a ``go.mod`` file.

  Instances are immutable once parsed; the scanner creates at most one per run.

  Attributes:
      module_path: The declared module path (empty if the file has none).
      go_version: The ``go`` directive value, if any.
      requires: Requirements in file order.
      replaces: Replacements in file order (first match wins).
      root_dir: Directory containing the ``go.mod`` file.
  """

  module_path: str
  go_version: str = ""
  requires: Tuple[RequireDirective, ...] = field(default_factory=tuple)
  replaces: Tuple[ReplaceDirective, ...] = field(default_factory=tuple)
  root_dir: Path = field(default_factory=Path)

  def is_internal(self, import_path: str) -> bool:
    """
    Checks whether an import path belongs to this module.

    Args:
        import_path: A Go import path (e.g. ``github.com/me/proj/pkg``).

    Returns:
        True if equal to, or ``/``-prefixed by, the module path.
    """
    if not self.module_path:
      return False
    return _has_path_prefix(import_path, self.module_path)

  def replacement_for(self, import_path: str) -> Optional[ReplaceDirective]:
    """
    Finds the first replace directive covering an import path.

    Args:
        import_path: The import path to look up.

    Returns:
        The matching directive, or None if the path is not replaced.
    """
    for directive in self.replaces:
      if _has_path_prefix(import_path, directive.old_path):
        return directive
    return None

  def is_replaced(self, import_path: str) -> Tuple[bool, str]:
    """
    Checks whether an import path is redirected by a replace directive.

    Args:
        import_path: The import path to look up.

    Returns:
        ``(True, new_path)`` for the first matching directive, else ``(False, "")``.
    """
    directive = self.replacement_for(import_path)
    if directive is None:
      return False, ""
    return True, directive.new_path

  def is_local_replacement(self, import_path: str) -> bool:
    """True if the import path is replaced by a local directory."""
    directive = self.replacement_for(import_path)
    return directive is not None and directive.is_local

  def requirement_for(self, import_path: str) -> Optional[RequireDirective]:
    """Returns the requirement whose module path covers ``import_path``."""
    best: Optional[RequireDirective] = None
    for req in self.requires:
      if _has_path_prefix(import_path, req.path):
        if best is None or len(req.path) > len(best.path):
          best = req
    return best

  def direct_dependencies(self) -> List[str]:
    """Module paths of all requirements not marked ``// indirect``."""
    return [req.path for req in self.requires if not req.indirect]

  def is_direct_dependency(self, import_path: str) -> bool:
    req = self.requirement_for(import_path)
    return req is not None and not req.indirect


def parse_manifest(manifest_path: Union[str, Path]) -> ModuleInfo:
  """
  Parses a ``go.mod`` file.

  Args:
      manifest_path: Path to the manifest file.

  Returns:
      ModuleInfo: The parsed module information.

  Raises:
      ManifestNotFoundError: If the file does not exist.
      ManifestError: If the file exists but cannot be read.
  """
  path = Path(manifest_path)
  try:
    text = path.read_text(encoding="utf-8")
  except FileNotFoundError as e:
    raise ManifestNotFoundError(f"{path} not found") from e
  except (OSError, UnicodeDecodeError) as e:
    raise ManifestError(f"failed to read {path}: {e}") from e

  info = parse_manifest_text(text, root_dir=path.parent)
  logger.debug("Parsed %s: module=%s requires=%d replaces=%d", path, info.module_path, len(info.requires), len(info.replaces))
  return info


def parse_manifest_text(text: str, root_dir: Union[str, Path] = ".") -> ModuleInfo:
  """
  Parses ``go.mod`` content that has already been read.

  Args:
      text: The raw manifest text.
      root_dir: Directory the manifest lives in.

  Returns:
      ModuleInfo: The parsed module information.
  """
  module_path = ""
  go_version = ""
  requires: List[RequireDirective] = []
  replaces: List[ReplaceDirective] = []
  block: Optional[str] = None

  for raw_line in text.splitlines():
    line = raw_line.strip()
    if not line or line.startswith(_COMMENT):
      continue

    if _strip_comment(line) == ")":
      block = None
      continue

    fields = line.split(None, 1)
    keyword = fields[0]
    rest = fields[1].strip() if len(fields) > 1 else ""

    if block is None and keyword == "module":
      module_path = _unquote(_strip_comment(rest))
      continue

    if block is None and keyword == "go":
      go_version = _strip_comment(rest)
      continue

    if block is None and keyword in ("require", "replace"):
      if rest.startswith("("):
        block = keyword
        continue
      line = rest
    elif block is None:
      # exclude/retract/toolchain and anything unknown
      if rest.startswith("("):
        block = keyword
      continue
    else:
      keyword = block

    if keyword == "require":
      req = _parse_require_line(line)
      if req is not None:
        requires.append(req)
    elif keyword == "replace":
      rep = _parse_replace_line(line)
      if rep is not None:
        replaces.append(rep)

  return ModuleInfo(
    module_path=module_path,
    go_version=go_version,
    requires=tuple(requires),
    replaces=tuple(replaces),
    root_dir=Path(root_dir),
  )


def find_manifest(start_dir: Union[str, Path]) -> Path:
  """
  Walks upward from ``start_dir`` looking for ``go.mod``.

  Args:
      start_dir: Directory (or file) to start from.

  Returns:
      Path: The absolute path of the first manifest found.

  Raises:
      ManifestNotFoundError: If the filesystem root is reached without a match.
  """
  current = Path(start_dir).resolve()
  if current.is_file():
    current = current.parent

  for directory in [current, *current.parents]:
    candidate = directory / MANIFEST_FILENAME
    if candidate.is_file():
      return candidate

  raise ManifestNotFoundError(f"{MANIFEST_FILENAME} not found above {start_dir}")


def load_manifest(start_dir: Union[str, Path]) -> Optional[ModuleInfo]:
  """
  Finds and parses the nearest manifest, mapping absence to None.

  Used by the scanner: a missing manifest degrades package resolution to
  heuristic mode instead of failing the run.

  Args:
      start_dir: Directory (or file) to start searching from.

  Returns:
      The parsed ModuleInfo, or None if no readable manifest exists.
  """
  try:
    return parse_manifest(find_manifest(start_dir))
  except ManifestNotFoundError:
    logger.debug("No %s found above %s; using heuristic package paths", MANIFEST_FILENAME, start_dir)
    return None


def _parse_require_line(line: str) -> Optional[RequireDirective]:
  """Parses ``path version [// comment]``."""
  body, comment = _split_comment(line)
  fields = body.split()
  if len(fields) < 2:
    return None
  return RequireDirective(
    path=_unquote(fields[0]),
    version=fields[1],
    indirect="indirect" in comment,
  )


def _parse_replace_line(line: str) -> Optional[ReplaceDirective]:
  """Parses ``old [oldVersion] => new [newVersion]``."""
  body, _ = _split_comment(line)
  parts = body.split(_ARROW)
  if len(parts) != 2:
    return None

  old_fields = parts[0].split()
  new_fields = parts[1].split()
  if not old_fields or not new_fields:
    return None

  return ReplaceDirective(
    old_path=_unquote(old_fields[0]),
    old_version=old_fields[1] if len(old_fields) > 1 else "",
    new_path=_unquote(new_fields[0]),
    new_version=new_fields[1] if len(new_fields) > 1 else "",
  )


def _split_comment(line: str) -> Tuple[str, str]:
  idx = line.find(_COMMENT)
  if idx < 0:
    return line.strip(), ""
  return line[:idx].strip(), line[idx + len(_COMMENT) :].strip()


def _strip_comment(text: str) -> str:
  return _split_comment(text)[0]


def _unquote(text: str) -> str:
  if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "`"):
    return text[1:-1]
  return text


def _has_path_prefix(path: str, prefix: str) -> bool:
  return path == prefix or path.startswith(prefix + "/")


def _is_local_path(path: str) -> bool:
  return path.startswith(("./", "../", "/"))
