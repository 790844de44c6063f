"""
Tests for the package path strategy chain.
"""

from pathlib import Path, PurePath

from workflow_lint.analysis.manifest import ModuleInfo
from workflow_lint.analysis.package_path import (
  DeclaredPackageStrategy,
  FixtureLayoutStrategy,
  PackagePathResolver,
  join_import_path,
)


def test_join_import_path():
  assert join_import_path("example.com/m", PurePath(".")) == "example.com/m"
  assert join_import_path("example.com/m/", PurePath("a/b")) == "example.com/m/a/b"


def test_manifest_resolution(tmp_path, parse_go):
  parsed = parse_go("package svc\n")
  info = ModuleInfo(module_path="github.com/me/proj", root_dir=tmp_path)
  resolver = PackagePathResolver.default(module_info=info)

  assert resolver.resolve(tmp_path / "pkg" / "svc" / "a.go", parsed) == "github.com/me/proj/pkg/svc"
  assert resolver.resolve(tmp_path / "main.go", parsed) == "github.com/me/proj"


def test_nested_directory_under_module_root(tmp_path, parse_go):
  parsed = parse_go("package pkg\n")
  info = ModuleInfo(module_path="example.com/project", root_dir=tmp_path)
  resolver = PackagePathResolver.default(module_info=info)

  assert resolver.resolve(tmp_path / "sub" / "pkg" / "file.go", parsed) == "example.com/project/sub/pkg"


def test_file_outside_module_falls_through_to_declared(tmp_path, parse_go):
  parsed = parse_go("package loose\n")
  info = ModuleInfo(module_path="github.com/me/proj", root_dir=tmp_path / "module")
  resolver = PackagePathResolver.default(module_info=info)

  assert resolver.resolve(tmp_path / "elsewhere" / "x.go", parsed) == "loose"


def test_fixture_layout(parse_go):
  parsed = parse_go("package pkgutil\n")
  strategy = FixtureLayoutStrategy({"testdata/mod": "example.com/linttest"})

  assert strategy.resolve(Path("/repo/tests/testdata/mod/pkgutil/helper.go"), parsed) == "example.com/linttest/pkgutil"
  assert strategy.resolve(Path("/repo/testdata/mod/helper.go"), parsed) == "example.com/linttest"
  assert strategy.resolve(Path("/repo/testdata/other/helper.go"), parsed) is None


def test_fixture_layout_does_not_depend_on_working_directory(tmp_path, parse_go, monkeypatch):
  parsed = parse_go("package app\n")
  fixture_dir = tmp_path / "testdata" / "mod" / "app"
  fixture_dir.mkdir(parents=True)
  strategy = FixtureLayoutStrategy({"testdata/mod": "example.com/linttest"})

  assert strategy.resolve(fixture_dir / "workflow.go", parsed) == "example.com/linttest/app"
  monkeypatch.chdir(tmp_path / "testdata")
  assert strategy.resolve(Path("mod/app/workflow.go"), parsed) == "example.com/linttest/app"


def test_fixture_layout_wins_over_manifest(tmp_path, parse_go):
  parsed = parse_go("package app\n")
  info = ModuleInfo(module_path="github.com/me/proj", root_dir=tmp_path)
  resolver = PackagePathResolver.default(module_info=info, fixture_roots={"testdata/mod": "example.com/linttest"})

  path = tmp_path / "testdata" / "mod" / "app" / "workflow.go"
  assert resolver.resolve(path, parsed) == "example.com/linttest/app"


def test_project_root_without_manifest(tmp_path, parse_go):
  parsed = parse_go("package billing\n")
  resolver = PackagePathResolver.default(project_root=tmp_path, project_module="github.com/acme/orders")

  assert resolver.resolve(tmp_path / "billing" / "b.go", parsed) == "github.com/acme/orders/billing"


def test_declared_and_fallback(parse_go):
  parsed = parse_go("package main\n")
  resolver = PackagePathResolver([DeclaredPackageStrategy()])
  assert resolver.resolve(Path("x.go"), parsed) == "main"

  parsed.package_name = ""
  assert PackagePathResolver([DeclaredPackageStrategy()]).resolve(Path("y.go"), parsed) == PackagePathResolver.FALLBACK


def test_resolution_is_idempotent(tmp_path, parse_go):
  parsed = parse_go("package svc\n")
  info = ModuleInfo(module_path="github.com/me/proj", root_dir=tmp_path)
  resolver = PackagePathResolver.default(module_info=info)
  path = tmp_path / "svc" / "a.go"

  first = resolver.resolve(path, parsed)
  assert resolver.resolve(path, parsed) == first
  assert PackagePathResolver.default(module_info=info).resolve(path, parsed) == first
