"""Tests for Lockfile validation and diffing."""

from __future__ import annotations

from lockwright.core.lockfile import LockEntry, Lockfile
from tests.helpers import release_checksum


def _lockfile(*entries: LockEntry) -> Lockfile:
    lf = Lockfile()
    for entry in entries:
        lf.add(entry)
    return lf


def _registry(name: str, version: str) -> LockEntry:
    return LockEntry(name=name, version=version, registry_name=name,
                     checksum=release_checksum(name, version))


class TestValidate:
    """Validate internal-consistency checks."""

    def test_valid_lockfile(self) -> None:
        lf = _lockfile(
            _registry("ecto", "0.2.0"),
            LockEntry(name="ex_doc", version="0.1.0", source="path", path="deps/ex_doc"),
            LockEntry(name="tool", version="main", source="git"),
        )
        assert lf.validate() == []

    def test_empty_lockfile_valid(self) -> None:
        assert Lockfile().validate() == []

    def test_unknown_source(self) -> None:
        errors = _lockfile(LockEntry(name="x", version="1.0.0", source="ftp")).validate()
        assert len(errors) == 1
        assert "unknown source" in errors[0]

    def test_empty_version(self) -> None:
        errors = _lockfile(LockEntry(name="x", version="", registry_name="x")).validate()
        assert any("empty version" in e for e in errors)

    def test_invalid_version(self) -> None:
        errors = _lockfile(LockEntry(name="x", version="one", registry_name="x")).validate()
        assert any("invalid version" in e for e in errors)

    def test_git_ref_not_checked_as_version(self) -> None:
        assert _lockfile(LockEntry(name="x", version="main", source="git")).validate() == []

    def test_registry_without_registry_name(self) -> None:
        errors = _lockfile(LockEntry(name="x", version="1.0.0")).validate()
        assert any("no registry name" in e for e in errors)

    def test_path_without_path(self) -> None:
        errors = _lockfile(LockEntry(name="x", version="1.0.0", source="path")).validate()
        assert any("no path" in e for e in errors)

    def test_bad_checksum(self) -> None:
        entry = LockEntry(name="x", version="1.0.0", registry_name="x", checksum="md5:abc")
        errors = _lockfile(entry).validate()
        assert any("invalid checksum" in e for e in errors)

    def test_missing_checksum_allowed(self) -> None:
        entry = LockEntry(name="x", version="1.0.0", registry_name="x")
        assert _lockfile(entry).validate() == []

    def test_errors_sorted_by_package(self) -> None:
        lf = _lockfile(
            LockEntry(name="zeta", version="bad", registry_name="zeta"),
            LockEntry(name="alpha", version="bad", registry_name="alpha"),
        )
        errors = lf.validate()
        assert "alpha" in errors[0]
        assert "zeta" in errors[1]


class TestDiff:
    """Validate structured lockfile comparison."""

    def test_identical(self) -> None:
        a = _lockfile(_registry("ecto", "0.2.0"))
        b = _lockfile(_registry("ecto", "0.2.0"))
        assert a.diff(b) == {"added": [], "removed": [], "changed": []}

    def test_added_and_removed(self) -> None:
        old = _lockfile(_registry("ecto", "0.2.0"), _registry("phoenix", "0.0.1"))
        new = _lockfile(_registry("ecto", "0.2.0"), _registry("postgrex", "0.2.0"))
        diff = old.diff(new)
        assert diff["added"] == ["postgrex"]
        assert diff["removed"] == ["phoenix"]

    def test_version_change_includes_checksum(self) -> None:
        old = _lockfile(_registry("ecto", "0.2.0"))
        new = _lockfile(_registry("ecto", "0.2.1"))
        changed = old.diff(new)["changed"]
        assert {c["field"] for c in changed} == {"version", "checksum"}
        version_change = next(c for c in changed if c["field"] == "version")
        assert version_change == {"name": "ecto", "field": "version", "old": "0.2.0", "new": "0.2.1"}

    def test_source_change(self) -> None:
        old = _lockfile(_registry("ex_doc", "0.1.0"))
        new = _lockfile(LockEntry(name="ex_doc", version="0.1.0", source="path", path="deps/ex_doc"))
        fields = {c["field"] for c in old.diff(new)["changed"]}
        assert "source" in fields
        assert "version" not in fields
