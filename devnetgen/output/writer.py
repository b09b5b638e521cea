"""
Manifest Writer.

Groups manifests by resolved path and writes each group as one YAML file.

Design Principle:
    Writing is idempotent. Files are always opened in write mode and the
    serialization depends only on the manifests, so re-running with the
    same input reproduces every file byte for byte. Groups keep the order
    in which their paths first appear, and manifests keep aggregation
    order within a group.

Usage:
    writer = ManifestWriter("out/")
    written = writer.write(manifests)   # list of absolute file paths
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import yaml

from devnetgen.errors import OutputTargetError
from devnetgen.output.paths import resolve_path

if TYPE_CHECKING:
    from devnetgen.schemas.manifest import Manifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputFile:
    """A relative path and the manifests destined for it."""

    path: PurePosixPath
    manifests: tuple[Manifest, ...]

    def render(self) -> str:
        return yaml.safe_dump_all(
            [manifest.to_dict() for manifest in self.manifests],
            sort_keys=False,
            explicit_start=len(self.manifests) > 1,
        )


def group_by_path(manifests: list[Manifest]) -> list[OutputFile]:
    groups: dict[PurePosixPath, list[Manifest]] = {}
    for manifest in manifests:
        groups.setdefault(resolve_path(manifest), []).append(manifest)
    return [OutputFile(path, tuple(group)) for path, group in groups.items()]


class ManifestWriter:
    """Writes manifests below one output directory."""

    def __init__(self, output_dir: str | Path | None):
        if not output_dir:
            raise OutputTargetError("Output directory is required")
        self.output_dir = Path(output_dir)

    def write(self, manifests: list[Manifest]) -> list[Path]:
        written = []
        for output_file in group_by_path(manifests):
            target = self.output_dir / output_file.path
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                f.write(output_file.render())
            logger.debug(f"[writer] {target} ({len(output_file.manifests)} manifests)")
            written.append(target)
        logger.info(f"[writer] Wrote {len(written)} files to {self.output_dir}")
        return written
