"""
Runtime Configuration Store.

Settings come from the ``[tool.workflow_lint]`` table of the nearest
``pyproject.toml`` (searched upward from the scan target) and are overridden
by CLI arguments.

Example:

.. code-block:: toml

    [tool.workflow_lint]
    rules_path = "lint/rules.yaml"
    workflow_markers = ["workflow.Context"]
    activity_markers = ["context.Context"]
    project_module = "github.com/acme/orders"
    project_root = "."
    fail_on = "warning"
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from workflow_lint.analysis.classifier import (
  DEFAULT_ACTIVITY_MARKERS,
  DEFAULT_REGISTRATIONS,
  DEFAULT_WORKFLOW_MARKERS,
  MarkerType,
  RegistrationCall,
)
from workflow_lint.analysis.imports import DEFAULT_FRAMEWORK_PACKAGES, DEFAULT_INTERNAL_PREFIXES
from workflow_lint.enums import OutputFormat, Severity

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore

logger = logging.getLogger(__name__)

TOOL_SECTION = "workflow_lint"


class RuntimeConfig(BaseModel):
  """
  Global configuration container for a scan.
  """

  rules_path: Optional[Path] = Field(None, description="Rule YAML file. None uses the bundled defaults.")
  workflow_markers: List[MarkerType] = Field(
    default_factory=lambda: list(DEFAULT_WORKFLOW_MARKERS),
    description="Parameter types marking workflow entry points.",
  )
  activity_markers: List[MarkerType] = Field(
    default_factory=lambda: list(DEFAULT_ACTIVITY_MARKERS),
    description="Parameter types marking activity entry points.",
  )
  registrations: List[RegistrationCall] = Field(
    default_factory=lambda: list(DEFAULT_REGISTRATIONS),
    description="SDK registration calls that classify their function argument.",
  )
  fixture_roots: Dict[str, str] = Field(
    default_factory=lambda: {"testdata/mod": "example.com/linttest"},
    description="Fixture directory marker -> synthetic module prefix.",
  )
  project_root: Optional[Path] = Field(None, description="Project root used when no go.mod exists.")
  project_module: Optional[str] = Field(None, description="Module path of project_root when no go.mod exists.")
  framework_packages: List[str] = Field(default_factory=lambda: list(DEFAULT_FRAMEWORK_PACKAGES))
  internal_prefixes: List[str] = Field(
    default_factory=lambda: list(DEFAULT_INTERNAL_PREFIXES),
    description="Import path prefixes treated as project code in heuristic mode.",
  )
  exclude_dirs: List[str] = Field(default_factory=lambda: ["vendor", "node_modules"])
  include_tests: bool = Field(True, description="Scan *_test.go files.")
  workers: int = Field(1, ge=1, description="Threads used for pass-1 parsing.")
  output_format: OutputFormat = Field(OutputFormat.JSON)
  fail_on: Optional[Severity] = Field(
    Severity.ERROR,
    description="Exit non-zero if an issue at or above this severity is found. None never fails on issues.",
  )

  @field_validator("workflow_markers", "activity_markers", mode="before")
  @classmethod
  def parse_markers(cls, v: Any) -> Any:
    """
    Accepts ``"pkg.Type"`` strings in addition to mappings.

    Args:
        v: Raw list from TOML or keyword arguments.

    Returns:
        The list with strings converted to MarkerType instances.
    """
    if not isinstance(v, list):
      return v
    return [MarkerType.parse(item) if isinstance(item, str) else item for item in v]

  @field_validator("fail_on", mode="before")
  @classmethod
  def parse_fail_on(cls, v: Any) -> Any:
    if isinstance(v, str) and v.strip().lower() in ("", "none", "never"):
      return None
    return v

  @field_validator("project_module")
  @classmethod
  def strip_module(cls, v: Optional[str]) -> Optional[str]:
    return v.strip().rstrip("/") if v else v

  @classmethod
  def load(
    cls,
    search_path: Optional[Path] = None,
    rules_path: Optional[Path] = None,
    output_format: Optional[str] = None,
    workers: Optional[int] = None,
    fail_on: Optional[str] = None,
    project_module: Optional[str] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
        rules_path (Optional[Path]): Override for the rule file.
        output_format (Optional[str]): Override for the output format.
        workers (Optional[int]): Override for the pass-1 thread count.
        fail_on (Optional[str]): Override for the failure threshold.
        project_module (Optional[str]): Override for the heuristic module path.

    Returns:
        RuntimeConfig: The fully resolved configuration object.

    Raises:
        ValueError: If the merged settings fail validation.
    """
    start_dir = search_path or Path.cwd()
    if start_dir.is_file():
      start_dir = start_dir.parent
    toml_config, toml_dir = _load_toml_settings(start_dir)

    settings: Dict[str, Any] = dict(toml_config)

    # Paths in the TOML file are relative to the file itself
    for key in ("rules_path", "project_root"):
      if key in settings and toml_dir is not None:
        settings[key] = (toml_dir / Path(settings[key])).resolve()

    overrides = {
      "rules_path": rules_path,
      "output_format": output_format,
      "workers": workers,
      "fail_on": fail_on,
      "project_module": project_module,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})

    if settings.get("project_module") and "project_root" not in settings:
      settings["project_root"] = toml_dir or start_dir.resolve()

    try:
      return cls.model_validate(settings)
    except ValidationError as e:
      raise ValueError(f"Invalid workflow-lint configuration: {e}") from e


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable %s: %s", toml_path, e)
        return {}, None

      section = data.get("tool", {}).get(TOOL_SECTION)
      if section is None:
        continue
      return section, parent

  return {}, None
