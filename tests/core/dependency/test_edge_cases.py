"""Tests for edge cases and boundary conditions in resolution.

Validates pre-release handling, dependency cycles, several local names
for one registry package, and resolver tuning knobs.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lockwright.core.dependency import RawRequirement, Resolver
from lockwright.exceptions import Unsatisfiable
from lockwright.registry import InMemoryRegistry
from tests.helpers import root_reqs, run, write_manifest


def _resolve(index: dict, *raws: RawRequirement, **kwargs):
    return run(Resolver(InMemoryRegistry(index), **kwargs).resolve(root_reqs(*raws)))


# ===========================================================================
# Pre-releases
# ===========================================================================


class TestPrereleases:
    """Pre-releases are only picked when a constraint names one."""

    INDEX = {"tool": {"1.0.0": {}, "1.1.0-rc.1": {}}}

    def test_release_preferred_over_newer_prerelease(self) -> None:
        assert _resolve(self.INDEX, RawRequirement("tool", ">= 1.0.0")).installed == {
            "tool": "1.0.0"
        }

    def test_prerelease_when_named(self) -> None:
        result = _resolve(self.INDEX, RawRequirement("tool", ">= 1.1.0-rc.1"))
        assert result.installed == {"tool": "1.1.0-rc.1"}

    def test_only_prereleases_is_unsatisfiable(self) -> None:
        with pytest.raises(Unsatisfiable):
            _resolve({"tool": {"2.0.0-beta": {}}}, RawRequirement("tool"))


# ===========================================================================
# Graph shapes
# ===========================================================================


class TestGraphShapes:
    """Unusual but legal requirement graphs."""

    def test_cycle(self) -> None:
        index = {
            "a": {"1.0.0": {"requirements": {"b": ">= 1.0.0"}}},
            "b": {"1.0.0": {"requirements": {"a": "1.0.0"}}},
        }
        assert _resolve(index, RawRequirement("a")).installed == {"a": "1.0.0", "b": "1.0.0"}

    def test_cycle_with_incompatible_back_edge(self) -> None:
        index = {
            "a": {"1.0.0": {"requirements": {"b": ">= 1.0.0"}}},
            "b": {"1.0.0": {"requirements": {"a": "2.0.0"}}},
        }
        with pytest.raises(Unsatisfiable):
            _resolve(index, RawRequirement("a"))

    def test_two_local_names_for_one_package(self, index: dict) -> None:
        """Identities are local names, so both copies resolve independently."""
        result = _resolve(
            index,
            RawRequirement("package_name", ">= 0.0.0"),
            RawRequirement("depend_name", "0.2.0"),
        )
        assert result.installed["package_name"] == "0.1.0"
        assert result.installed["app_name"] == "0.1.0"
        assert result.get("app_name").registry_name == "package_name"

    def test_path_package_without_deps(self, tmp_path: Path, index: dict) -> None:
        local = write_manifest(tmp_path / "local", None, name="local", version="3.0.0")
        result = run(
            Resolver(InMemoryRegistry(index)).resolve(
                root_reqs(RawRequirement("local", path="local"), base_dir=tmp_path)
            )
        )
        assert result.installed == {"local": "3.0.0"}
        assert result.get("local").source.location == local.as_posix()


# ===========================================================================
# Resolver knobs
# ===========================================================================


class TestResolverOptions:
    """Prefetching changes what is fetched, never what is selected."""

    @pytest.mark.parametrize("prefetch", [0, 1, 5])
    def test_prefetch_does_not_change_result(self, index: dict, prefetch: int) -> None:
        result = _resolve(index, RawRequirement("ecto", "0.2.0"), prefetch=prefetch)
        assert result.installed == {"ecto": "0.2.0", "postgrex": "0.2.0", "ex_doc": "0.0.1"}
