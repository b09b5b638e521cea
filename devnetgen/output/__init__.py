"""Output layer: label-driven file paths and the YAML writer."""

from .paths import resolve_path
from .writer import ManifestWriter, OutputFile, group_by_path

__all__ = [
    "ManifestWriter",
    "OutputFile",
    "group_by_path",
    "resolve_path",
]
