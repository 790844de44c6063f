"""
Two-Pass Scan Orchestrator.

Pass 1 (discovery) parses every file, resolves its package path, classifies
its functions and feeds classifications and call edges into one shared
``WorkflowRegistry``. Pass 2 (detection) runs the detectors against the
completed registry, so a finding in one file can depend on workflows declared
in any other file.

The registry is only written on the calling thread. With ``workers > 1`` the
reading and parsing of files is spread over a thread pool and the results are
folded into the registry in discovery order, which keeps output identical to
a sequential run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from workflow_lint.analysis.callgraph import build_edges
from workflow_lint.analysis.classifier import FunctionClassifier
from workflow_lint.analysis.imports import ImportClassifier
from workflow_lint.analysis.manifest import ModuleInfo, load_manifest
from workflow_lint.analysis.package_path import PackagePathResolver
from workflow_lint.analysis.parsing import GoSourceParser, ParsedFile, build_import_aliases
from workflow_lint.analysis.registry import WorkflowRegistry
from workflow_lint.config import RuntimeConfig
from workflow_lint.detectors import Detector, default_detectors
from workflow_lint.errors import SourceParseError
from workflow_lint.models import FileRecord, Issue, ScanFailure, ScanResult
from workflow_lint.rules.schema import RuleSet

logger = logging.getLogger(__name__)

GO_SUFFIX = ".go"
TEST_SUFFIX = "_test.go"

DetectorFactory = Callable[[RuleSet, ImportClassifier], List[Detector]]

_ParseOutcome = Tuple[Path, Optional[ParsedFile], Optional[ScanFailure]]


def discover_files(target: Path, exclude_dirs: Iterable[str] = ("vendor",), include_tests: bool = True) -> List[Path]:
  """
  Lists Go source files under a target.

  Args:
      target: A ``.go`` file or a directory.
      exclude_dirs: Directory names never descended into.
      include_tests: Whether ``*_test.go`` files are kept.

  Returns:
      List[Path]: Files in sorted order. A single file target is returned
      as-is regardless of filters.
  """
  if target.is_file():
    return [target]

  excluded = set(exclude_dirs)
  files = []
  for path in target.rglob(f"*{GO_SUFFIX}"):
    relative = path.relative_to(target)
    if any(part in excluded or part.startswith(".") for part in relative.parts[:-1]):
      continue
    if not include_tests and path.name.endswith(TEST_SUFFIX):
      continue
    if path.is_file():
      files.append(path)
  return sorted(files)


class Scanner:
  """
  Runs the discovery and detection passes over a file tree.

  Attributes:
      config: Runtime settings.
      rules: Rule tables for the detectors.
      registry: The shared registry; a caller-provided one is reused so
          results from several ``scan`` calls accumulate.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    rules: Optional[RuleSet] = None,
    registry: Optional[WorkflowRegistry] = None,
    detector_factory: DetectorFactory = default_detectors,
  ):
    self.config = config or RuntimeConfig()
    self.rules = rules or RuleSet()
    self.registry = registry if registry is not None else WorkflowRegistry()
    self.detector_factory = detector_factory
    self.parser = GoSourceParser()
    self.classifier = FunctionClassifier(
      workflow_markers=self.config.workflow_markers,
      activity_markers=self.config.activity_markers,
      registrations=self.config.registrations,
    )

  def scan(self, target: Union[str, Path]) -> ScanResult:
    """
    Scans a file or directory.

    Args:
        target: Path to a ``.go`` file or a directory tree.

    Returns:
        ScanResult: Sorted issues, skipped files and the number of files
        that made it through pass 1.

    Raises:
        FileNotFoundError: If the target does not exist.
    """
    target = Path(target)
    if not target.exists():
      raise FileNotFoundError(f"Path not found: {target}")

    module_info = load_manifest(target)
    if module_info is not None:
      logger.debug("Using module %s from %s", module_info.module_path, module_info.root_dir)

    resolver = PackagePathResolver.default(
      module_info=module_info,
      fixture_roots=self.config.fixture_roots,
      project_root=self.config.project_root,
      project_module=self.config.project_module,
    )
    import_classifier = self.import_classifier(module_info)

    files = discover_files(target, self.config.exclude_dirs, self.config.include_tests)
    logger.debug("Discovered %d Go files under %s", len(files), target)

    result = ScanResult()
    records = self._discover(files, resolver, result)
    result.files_scanned = len(records)

    issues: List[Issue] = []
    for record in records:
      for detector in self.detector_factory(self.rules, import_classifier):
        issues.extend(detector.detect(record, self.registry))

    result.issues = sorted(issues, key=Issue.sort_key)
    logger.debug("Registry: %s", self.registry.summary())
    return result

  def import_classifier(self, module_info: Optional[ModuleInfo]) -> ImportClassifier:
    internal = list(self.config.internal_prefixes)
    if self.config.project_module:
      internal.append(self.config.project_module)
    return ImportClassifier(
      module_info=module_info,
      internal_prefixes=internal,
      framework_packages=self.config.framework_packages,
      safe_packages=self.rules.safe_external_packages,
    )

  def _discover(self, files: Sequence[Path], resolver: PackagePathResolver, result: ScanResult) -> List[FileRecord]:
    """Pass 1. Registry mutation happens here and nowhere else."""
    records: List[FileRecord] = []
    for path, parsed, failure in self._parse_all(files):
      if failure is not None:
        result.failures.append(failure)
        continue

      package_path = resolver.resolve(path, parsed)
      aliases = build_import_aliases(parsed.imports)
      self.registry.apply(self.classifier.classify(parsed, package_path, aliases))
      self.registry.add_edges(build_edges(parsed, package_path, aliases))
      records.append(FileRecord(path=path, tree=parsed, import_aliases=aliases, package_path=package_path))
    return records

  def _parse_all(self, files: Sequence[Path]) -> List[_ParseOutcome]:
    if self.config.workers > 1 and len(files) > 1:
      with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
        return list(pool.map(self._parse_one, files))
    return [self._parse_one(path) for path in files]

  def _parse_one(self, path: Path) -> _ParseOutcome:
    try:
      return path, self.parser.parse_file(path), None
    except SourceParseError as e:
      logger.warning("Skipping %s: %s", path, e)
      return path, None, ScanFailure(file=str(path), error=str(e), line=e.line)
    except OSError as e:
      logger.warning("Skipping %s: cannot read file (%s)", path, e)
      return path, None, ScanFailure(file=str(path), error=str(e))
