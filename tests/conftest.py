"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Go source helpers (in-memory parsing and on-disk project layout).
- The bundled rule set and the checked-in Go fixture corpus.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

# Add src to path so we can import 'workflow_lint' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from workflow_lint.analysis.parsing import GoSourceParser, ParsedFile  # noqa: E402
from workflow_lint.rules import RuleSet, load_rules  # noqa: E402

TESTDATA_DIR = Path(__file__).parent / "testdata"


@pytest.fixture
def testdata_dir() -> Path:
  """Directory of Go fixtures shared by detector and scanner tests."""
  return TESTDATA_DIR


@pytest.fixture(scope="session")
def default_rules() -> RuleSet:
  return load_rules()


@pytest.fixture
def parse_go() -> Callable[..., ParsedFile]:
  """Parses dedented Go source held in a string."""
  parser = GoSourceParser()

  def _parse(source: str, path: str = "main.go") -> ParsedFile:
    return parser.parse(textwrap.dedent(source).lstrip(), path)

  return _parse


@pytest.fixture
def go_project(tmp_path) -> Callable[[Dict[str, str]], Path]:
  """
  Writes a tree of files (relative path -> content) below tmp_path.

  Returns the project root.
  """

  def _write(files: Dict[str, str]) -> Path:
    for rel, content in files.items():
      target = tmp_path / rel
      target.parent.mkdir(parents=True, exist_ok=True)
      target.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return tmp_path

  return _write
