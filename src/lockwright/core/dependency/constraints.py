"""Semantic versions and version constraint expressions.

Constraint semantics follow SemVer 2.0.0 precedence with the operator set
common to package managers: exact match (``==`` or a bare version),
not-equal (``!=``), ranges (``>=``, ``<=``, ``>``, ``<``), compatible range
(``~>``), caret (``^``), tilde (``~``) and wildcard (``*``). Atoms are joined
with ``and`` (or a comma) and alternatives with ``or``; ``and`` binds
tighter.

Pre-release versions only match a constraint that itself names a
pre-release version, so ``>= 1.0.0`` never selects ``2.0.0-rc.1``.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Version comparison utilities
# ---------------------------------------------------------------------------

_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?$"
)

# Versions inside constraints may omit the patch component ("~> 2.0").
_PARTIAL_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)(?:\.(?P<patch>0|[1-9]\d*))?"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?$"
)

_ATOM_RE = re.compile(r"^(?P<op>==|!=|>=|<=|~>|>|<|\^|~)?\s*(?P<ver>\S+)$")

VersionKey = tuple

_RELEASE = (1,)


def _pre_key(pre: str | None) -> tuple:
    if not pre:
        return _RELEASE
    parts: list[tuple[int, int | str]] = []
    for ident in pre.split("."):
        if ident.isdigit():
            parts.append((0, int(ident)))
        else:
            parts.append((1, ident))
    return (0, tuple(parts))


def parse_version(version: str) -> VersionKey:
    """Parse a semantic version string into a comparable precedence key.

    Build metadata does not affect precedence and pre-release versions have
    lower precedence than the associated normal version (SemVer section 11).

    Args:
        version: Semantic version string (e.g., "1.2.3", "0.1.0-alpha.1").

    Returns:
        A tuple ``(major, minor, patch, pre)`` that sorts by precedence.

    Raises:
        ValueError: If the string does not match semantic version format.
    """
    m = _SEMVER_RE.match(version.strip())
    if not m:
        raise ValueError(f"Invalid semantic version: {version!r}")
    return (
        int(m.group("major")),
        int(m.group("minor")),
        int(m.group("patch")),
        _pre_key(m.group("pre")),
    )


def is_valid_version(version: str) -> bool:
    """Return True if *version* is a well-formed semantic version."""
    return _SEMVER_RE.match(version.strip()) is not None


def is_prerelease(version: str) -> bool:
    """Return True if *version* carries a pre-release component."""
    return parse_version(version)[3] != _RELEASE


def version_key(version: str) -> VersionKey:
    """Sort key for version strings (use ``reverse=True`` for newest first)."""
    return parse_version(version)


def sort_versions(versions: Iterable[str], newest_first: bool = True) -> list[str]:
    """Return *versions* ordered by precedence, skipping malformed entries."""
    valid = [v for v in versions if is_valid_version(v)]
    return sorted(set(valid), key=version_key, reverse=newest_first)


# ---------------------------------------------------------------------------
# Constraint atoms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Atom:
    op: str
    target: VersionKey
    parts: int
    mentions_pre: bool

    def matches(self, key: VersionKey) -> bool:
        op = self.op
        target = self.target
        if op == "==":
            return key == target
        if op == "!=":
            return key != target
        if op == ">=":
            return key >= target
        if op == "<=":
            return key <= target
        if op == ">":
            return key > target
        if op == "<":
            return key < target
        if op == "~>":
            # "~> 2.1" allows < 3.0.0, "~> 2.1.3" allows < 2.2.0.
            if self.parts == 2:
                upper = (target[0] + 1, 0, 0, (0, ((0, 0),)))
            else:
                upper = (target[0], target[1] + 1, 0, (0, ((0, 0),)))
            return target <= key < upper
        if op == "^":
            # Same major, or same major.minor while major is 0.
            if target[0] == 0:
                return key[:2] == target[:2] and key >= target
            return key[0] == target[0] and key >= target
        if op == "~":
            return key[:2] == target[:2] and key >= target
        raise ValueError(f"Unknown operator: {op!r}")  # pragma: no cover


def _parse_atom(text: str) -> _Atom:
    m = _ATOM_RE.match(text.strip())
    if not m:
        raise ValueError(f"Invalid constraint atom: {text!r}")
    op = m.group("op") or "=="
    ver = _PARTIAL_RE.match(m.group("ver"))
    if not ver:
        raise ValueError(f"Invalid version in constraint: {text!r}")
    parts = 3 if ver.group("patch") is not None else 2
    target = (
        int(ver.group("major")),
        int(ver.group("minor")),
        int(ver.group("patch") or 0),
        _pre_key(ver.group("pre")),
    )
    return _Atom(op=op, target=target, parts=parts, mentions_pre=bool(ver.group("pre")))


def _split_words(expr: str, word: str) -> list[str]:
    return [p.strip() for p in re.split(rf"\s+{word}\s+", expr.strip())]


# ---------------------------------------------------------------------------
# VersionConstraint: Declarative version requirement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VersionConstraint:
    """A version constraint expression, e.g. ``"~> 0.1.0"`` or ``">= 1.0.0 and < 2.0.0"``.

    The expression is parsed eagerly so that malformed constraints fail at
    construction time rather than in the middle of a resolution.

    Attributes:
        raw: The raw constraint string as authored.

    Raises:
        ValueError: If *raw* is not a valid constraint expression.
    """

    raw: str
    _clauses: tuple[tuple[_Atom, ...], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        stripped = self.raw.strip()
        if not stripped:
            raise ValueError("Empty version constraint")
        clauses: list[tuple[_Atom, ...]] = []
        if stripped != "*":
            for alternative in _split_words(stripped, "or"):
                atoms = []
                for conj in _split_words(alternative, "and"):
                    atoms.extend(
                        _parse_atom(a) for a in conj.split(",") if a.strip()
                    )
                if not atoms:
                    raise ValueError(f"Invalid constraint: {self.raw!r}")
                clauses.append(tuple(atoms))
        object.__setattr__(self, "_clauses", tuple(clauses))

    @classmethod
    def wildcard(cls) -> VersionConstraint:
        """Return the constraint matching every release version."""
        return cls("*")

    @property
    def is_any(self) -> bool:
        """True for the wildcard constraint."""
        return not self._clauses

    @property
    def allows_prerelease(self) -> bool:
        """True if some atom names a pre-release version."""
        return any(a.mentions_pre for clause in self._clauses for a in clause)

    def satisfies(self, version: str) -> bool:
        """Check whether a version string satisfies this constraint.

        Args:
            version: A semantic version string (e.g., "1.2.3").

        Returns:
            True if at least one ``or`` alternative has every atom satisfied.

        Raises:
            ValueError: If *version* is not a valid semantic version.
        """
        key = parse_version(version)
        if key[3] != _RELEASE and not self.allows_prerelease:
            return False
        if not self._clauses:
            return True
        return any(all(a.matches(key) for a in clause) for clause in self._clauses)

    def __str__(self) -> str:
        return self.raw.strip()

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"


def satisfies_all(constraints: Iterable[VersionConstraint], version: str) -> bool:
    """Return True if *version* satisfies every constraint (their intersection)."""
    return all(c.satisfies(version) for c in constraints)
