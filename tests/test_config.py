"""
Tests for RuntimeConfig loading from pyproject.toml and CLI overrides.
"""

import pytest

from workflow_lint.analysis.classifier import MarkerType
from workflow_lint.config import RuntimeConfig
from workflow_lint.enums import OutputFormat, Severity


def test_defaults():
  config = RuntimeConfig()
  assert config.output_format is OutputFormat.JSON
  assert config.fail_on is Severity.ERROR
  assert config.workers == 1
  assert config.fixture_roots == {"testdata/mod": "example.com/linttest"}
  assert str(config.workflow_markers[0]) == "workflow.Context"
  assert "vendor" in config.exclude_dirs


def test_load_from_pyproject(tmp_path):
  (tmp_path / "pyproject.toml").write_text(
    """
[tool.workflow_lint]
rules_path = "lint/rules.yaml"
workflow_markers = ["workflow.Context", "go.temporal.io/sdk/workflow.Context"]
project_module = "github.com/acme/orders/"
output_format = "table"
fail_on = "warning"
workers = 2
"""
  )
  nested = tmp_path / "svc" / "billing"
  nested.mkdir(parents=True)

  config = RuntimeConfig.load(search_path=nested)

  assert config.rules_path == (tmp_path / "lint" / "rules.yaml").resolve()
  assert config.workflow_markers[1] == MarkerType(package="go.temporal.io/sdk/workflow", name="Context")
  assert config.project_module == "github.com/acme/orders"
  assert config.project_root == tmp_path.resolve()
  assert config.output_format is OutputFormat.TABLE
  assert config.fail_on is Severity.WARNING
  assert config.workers == 2


def test_cli_overrides_pyproject(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.workflow_lint]\noutput_format = "table"\nfail_on = "info"\n')

  config = RuntimeConfig.load(search_path=tmp_path, output_format="yaml", fail_on="none", workers=4)

  assert config.output_format is OutputFormat.YAML
  assert config.fail_on is None
  assert config.workers == 4


def test_pyproject_without_section_is_skipped(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[project]\nname = "unrelated"\n')
  config = RuntimeConfig.load(search_path=tmp_path)
  assert config.output_format is OutputFormat.JSON


def test_invalid_settings_raise(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.workflow_lint]\nworkers = 0\n")
  with pytest.raises(ValueError, match="Invalid workflow-lint configuration"):
    RuntimeConfig.load(search_path=tmp_path)
