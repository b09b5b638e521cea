"""
Pipeline entry points.

Design Principle:
    One Generator wires the catalogue, resolver, script provider, builder
    factory and aggregator together for a project root. It holds no
    per-network state, so it can be reused for any number of networks.

    build() validates the output target before doing any work, so a
    missing directory never leaves partial output behind.

Usage:
    network = load_network_spec("devnet.yaml")

    # One-shot helpers
    manifests = generate(network, project_root="/srv/devnet")
    build(network, "out/", project_root="/srv/devnet")

    # Reusable generator
    generator = Generator(GeneratorSettings(project_root=Path("/srv/devnet")))
    generator.build(network, "out/")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from devnetgen.aggregator import ManifestAggregator
from devnetgen.builders import BuildContext, EntityBuilderFactory
from devnetgen.config import GeneratorSettings, get_settings
from devnetgen.errors import ConfigurationError
from devnetgen.output import ManifestWriter
from devnetgen.runtime import ConfigResolver, ScriptProvider
from devnetgen.schemas import Manifest, NetworkSpec

logger = logging.getLogger(__name__)


def load_network_spec(path: str | Path) -> NetworkSpec:
    """
    Load and validate a network description from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, is not a YAML mapping,
            or does not validate
    """
    path = Path(path)
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read network file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} does not describe a mapping")
    return parse_network_spec(data)


def parse_network_spec(data: NetworkSpec | Mapping[str, Any]) -> NetworkSpec:
    if isinstance(data, NetworkSpec):
        return data
    try:
        return NetworkSpec.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid network description: {e}") from e


class Generator:
    """Manifest generation pipeline bound to one project root."""

    def __init__(self, settings: GeneratorSettings | None = None):
        self.settings = settings or get_settings()
        self.resolver = ConfigResolver.for_project(
            self.settings.project_root,
            defaults_file=self.settings.defaults_file,
        )
        self.context = BuildContext(
            resolver=self.resolver,
            scripts=ScriptProvider(self.settings.project_root),
            settings=self.settings,
        )
        self.factory = EntityBuilderFactory(self.context)
        self.aggregator = ManifestAggregator(self.context, self.factory)

    def generate(self, network: NetworkSpec | Mapping[str, Any]) -> list[Manifest]:
        """Resolve, dispatch and aggregate without writing anything."""
        return self.aggregator.aggregate(parse_network_spec(network))

    def build(self, network: NetworkSpec | Mapping[str, Any], output_dir: str | Path | None) -> list[Path]:
        """Generate manifests and write them below output_dir."""
        writer = ManifestWriter(output_dir)
        manifests = self.generate(network)
        return writer.write(manifests)


def _settings_for(
    project_root: str | Path | None, settings: GeneratorSettings | None
) -> GeneratorSettings:
    settings = settings or get_settings()
    if project_root is not None:
        settings = settings.model_copy(update={"project_root": Path(project_root)})
    return settings


def generate(
    network: NetworkSpec | Mapping[str, Any],
    *,
    project_root: str | Path | None = None,
    settings: GeneratorSettings | None = None,
) -> list[Manifest]:
    return Generator(_settings_for(project_root, settings)).generate(network)


def build(
    network: NetworkSpec | Mapping[str, Any],
    output_dir: str | Path | None,
    *,
    project_root: str | Path | None = None,
    settings: GeneratorSettings | None = None,
) -> list[Path]:
    """
    Generate and write every manifest of a network.

    Raises:
        OutputTargetError: If output_dir is empty, before any other work
        ConfigurationError: If the network is structurally invalid
    """
    ManifestWriter(output_dir)  # raises before the catalogue is loaded
    return Generator(_settings_for(project_root, settings)).build(network, output_dir)
