"""Tests for ``lockwright get``.

Verifies:
    - A fresh project resolves, prints what it fetched and writes the lock.
    - A second run is a no-op that leaves the lockfile untouched.
    - Locked versions are kept while they still satisfy the manifest.
    - Path dependencies are locked relative to the project.
    - Failures map to exit codes 1 (resolution) and 2 (bad input).
"""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from lockwright.cli.main import cli
from tests.helpers import read_lock, release_checksum, write_manifest


class TestGetFreshProject:
    """Resolving a project with no lockfile."""

    def test_exit_code_zero(self, invoke, manifest) -> None:
        manifest({"ecto": "0.2.0"})
        result = invoke("get")
        assert result.exit_code == 0, result.output

    def test_prints_getting_lines(self, invoke, manifest) -> None:
        manifest({"ecto": "0.2.0"})
        result = invoke("get")
        for name in ("ecto", "postgrex", "ex_doc"):
            assert f"* Getting {name} (registry package)" in result.output
        assert "Lockfile written to" in result.output

    def test_writes_lockfile(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0"})
        invoke("get")
        packages = read_lock(project_dir)
        assert {name: p["version"] for name, p in packages.items()} == {
            "ecto": "0.2.0",
            "postgrex": "0.2.0",
            "ex_doc": "0.0.1",
        }
        assert packages["ecto"] == {
            "source": "registry",
            "version": "0.2.0",
            "registry_name": "ecto",
            "checksum": release_checksum("ecto", "0.2.0"),
        }

    def test_override(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0", "ex_doc": {"requirement": "~> 0.1.0", "override": True}})
        result = invoke("get")
        assert result.exit_code == 0, result.output
        packages = read_lock(project_dir)
        assert packages["postgrex"]["version"] == "0.2.1"
        assert packages["ex_doc"]["version"] == "0.1.0"

    def test_alias_records_registry_name(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"depend_name": "0.2.0"})
        invoke("get")
        assert read_lock(project_dir)["app_name"]["registry_name"] == "package_name"

    def test_optional_dependency_not_locked(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"only_doc": ">= 0.0.0"})
        invoke("get")
        assert set(read_lock(project_dir)) == {"only_doc"}


class TestGetPathDependency:
    """Path dependencies override registry requirements."""

    def test_path_locked_relative(self, invoke, manifest, project_dir: Path,
                                  ex_doc_path: Path) -> None:
        manifest({"ecto": "0.2.0", "ex_doc": {"path": "deps/ex_doc"}})
        result = invoke("get")
        assert result.exit_code == 0, result.output
        assert "* Getting ex_doc (path package)" in result.output
        packages = read_lock(project_dir)
        assert packages["ex_doc"] == {"source": "path", "version": "0.1.0", "path": "deps/ex_doc"}
        assert packages["postgrex"]["version"] == "0.2.1"

    def test_missing_path_is_bad_input(self, invoke, manifest) -> None:
        manifest({"ex_doc": {"path": "deps/nowhere"}})
        result = invoke("get")
        assert result.exit_code == 2
        assert "Error:" in result.output


class TestGetWithLock:
    """Re-running against an existing lockfile."""

    def test_second_run_is_noop(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0"})
        invoke("get")
        lock_path = project_dir / "lockwright.lock"
        before = lock_path.read_bytes()
        mtime = lock_path.stat().st_mtime_ns

        result = invoke("get")
        assert result.exit_code == 0
        assert "All dependencies are up to date." in result.output
        assert "Getting" not in result.output
        assert "Lockfile written to" not in result.output
        assert lock_path.read_bytes() == before
        assert lock_path.stat().st_mtime_ns == mtime

    def test_locked_version_kept(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0"})
        invoke("get")
        manifest({"ecto": ">= 0.0.0"})
        result = invoke("get")
        assert result.exit_code == 0
        assert read_lock(project_dir)["ecto"]["version"] == "0.2.0"

    def test_incompatible_lock_updated(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0"})
        invoke("get")
        manifest({"ecto": "0.2.1"})
        result = invoke("get")
        assert result.exit_code == 0
        assert "* Updating ecto 0.2.0 -> 0.2.1 (registry package)" in result.output
        assert read_lock(project_dir)["ex_doc"]["version"] == "0.1.0"

    def test_unused_entries_kept_without_prune(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"phoenix": "0.0.1", "ex_doc": "0.1.0"})
        invoke("get")
        manifest({"ex_doc": "0.1.0"})
        invoke("get")
        assert "phoenix" in read_lock(project_dir)

    def test_prune(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"phoenix": "0.0.1", "ex_doc": "0.1.0"})
        invoke("get")
        manifest({"ex_doc": "0.1.0"})
        result = invoke("get", "--prune")
        assert result.exit_code == 0
        assert set(read_lock(project_dir)) == {"ex_doc"}

    def test_custom_lockfile(self, runner: CliRunner, manifest, project_dir: Path,
                             registry_file: Path, tmp_path: Path) -> None:
        manifest({"ex_doc": "0.1.0"})
        target = tmp_path / "locks" / "custom.lock"
        result = runner.invoke(cli, [
            "get", "--project", str(project_dir), "--registry-file", str(registry_file),
            "--lockfile", str(target),
        ])
        assert result.exit_code == 0, result.output
        assert target.exists()
        assert not (project_dir / "lockwright.lock").exists()


class TestGetFailures:
    """Exit codes for failed runs."""

    def test_unsatisfiable_exits_1(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0", "ex_doc": "0.1.0"})
        result = invoke("get")
        assert result.exit_code == 1
        assert "Resolution failed" in result.output
        assert not (project_dir / "lockwright.lock").exists()

    def test_unknown_package_exits_1(self, invoke, manifest) -> None:
        manifest({"no_such_package": "1.0.0"})
        assert invoke("get").exit_code == 1

    def test_conflicting_overrides_exit_1(self, invoke, manifest, project_dir: Path) -> None:
        write_manifest(
            project_dir / "deps" / "helper",
            {"ex_doc": {"requirement": "0.0.1", "override": True}},
            name="helper",
        )
        manifest({
            "helper": {"path": "deps/helper"},
            "ex_doc": {"requirement": "0.1.0", "override": True},
        })
        result = invoke("get")
        assert result.exit_code == 1
        assert "Resolution failed" in result.output

    def test_missing_manifest_exits_2(self, invoke) -> None:
        result = invoke("get")
        assert result.exit_code == 2
        assert "lockwright.yaml" in result.output

    def test_invalid_manifest_exits_2(self, invoke, project_dir: Path) -> None:
        (project_dir / "lockwright.yaml").write_text("deps: [unclosed\n")
        assert invoke("get").exit_code == 2

    def test_invalid_constraint_exits_2(self, invoke, manifest) -> None:
        manifest({"ecto": ">> nope"})
        assert invoke("get").exit_code == 2

    def test_corrupt_lockfile_exits_2(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0"})
        (project_dir / "lockwright.lock").write_text("{corrupt")
        assert invoke("get").exit_code == 2

    def test_invalid_lock_entry_exits_2(self, invoke, manifest, project_dir: Path) -> None:
        manifest({"ecto": "0.2.0"})
        (project_dir / "lockwright.lock").write_text(
            json.dumps({"packages": {"ecto": {"version": "garbage", "registry_name": "ecto"}}})
        )
        assert invoke("get").exit_code == 2

    def test_bad_registry_file_exits_2(self, runner: CliRunner, manifest, project_dir: Path,
                                       tmp_path: Path) -> None:
        manifest({"ecto": "0.2.0"})
        bad = tmp_path / "bad.json"
        bad.write_text("{oops")
        result = runner.invoke(cli, [
            "get", "--project", str(project_dir), "--registry-file", str(bad),
        ])
        assert result.exit_code == 2

    def test_no_registry_is_usage_error(self, runner: CliRunner, manifest,
                                        project_dir: Path) -> None:
        manifest({"ecto": "0.2.0"})
        result = runner.invoke(
            cli, ["get", "--project", str(project_dir)],
            env={"LOCKWRIGHT_REGISTRY_FILE": None, "LOCKWRIGHT_REGISTRY_URL": None},
        )
        assert result.exit_code == 2
        assert "No registry configured" in result.output

    def test_registry_file_from_env(self, runner: CliRunner, manifest, project_dir: Path,
                                    registry_file: Path) -> None:
        manifest({"ex_doc": "0.1.0"})
        result = runner.invoke(
            cli, ["get", "--project", str(project_dir)],
            env={"LOCKWRIGHT_REGISTRY_FILE": str(registry_file)},
        )
        assert result.exit_code == 0, result.output
