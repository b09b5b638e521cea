"""
Output path resolution.

Derives a manifest's file path purely from its labels. Rules, first match
wins:

    1. component == "chain"   -> <chain-name>/<role or "default">-<kind>.yaml
    2. part-of == "global"    -> configmaps/<name without "-configmap">.yaml
    3. any other component    -> <component>/<name without component prefix>-<kind>.yaml
                                 (<component>/<kind>.yaml if nothing is left)
    4. otherwise              -> <name>-<kind>.yaml

Kinds are lowercased. Paths are relative and use forward slashes.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devnetgen.schemas.manifest import Manifest

DEFAULT_ROLE = "default"
GLOBAL_PART_OF = "global"
CONFIGMAP_SUFFIX = "-configmap"


def strip_component_prefix(name: str, component: str) -> str:
    """Drop a leading component name and any dashes that follow it."""
    if name == component:
        return ""
    if name.startswith(f"{component}-"):
        return name[len(component):].lstrip("-")
    return name


def resolve_path(manifest: Manifest) -> PurePosixPath:
    """Relative output path for one manifest."""
    kind = manifest.kind.lower()
    component = manifest.component

    if component == "chain":
        chain_dir = manifest.chain_name or manifest.part_of or manifest.name
        return PurePosixPath(chain_dir, f"{manifest.role or DEFAULT_ROLE}-{kind}.yaml")

    if manifest.part_of == GLOBAL_PART_OF:
        return PurePosixPath("configmaps", f"{manifest.name.removesuffix(CONFIGMAP_SUFFIX)}.yaml")

    if component:
        stripped = strip_component_prefix(manifest.name, component)
        filename = f"{stripped}-{kind}.yaml" if stripped else f"{kind}.yaml"
        return PurePosixPath(component, filename)

    return PurePosixPath(f"{manifest.name}-{kind}.yaml")
