"""Project and path-dependency manifests."""

from lockwright.project.manifest import (
    MANIFEST_NAME,
    Manifest,
    parse_manifest,
    read_manifest,
)

__all__ = [
    "MANIFEST_NAME",
    "Manifest",
    "parse_manifest",
    "read_manifest",
]
