"""
Base classes for manifest builders.

Design Principle:
    A builder consumes one resolved entity plus the whole network and
    returns an ordered list of manifests. Internally it is a sequence of
    small generators (ConfigMap, Service, StatefulSet/Deployment) whose
    outputs are concatenated in that order.

    Builders hold only the shared, read-only BuildContext. All per-run data
    arrives through build(), so one builder instance can serve many runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from devnetgen.config import GeneratorSettings

if TYPE_CHECKING:
    from devnetgen.runtime import ConfigResolver, ScriptProvider
    from devnetgen.schemas import Manifest, NetworkSpec, RelayerSpec, ResolvedChain, ResolvedRelayer


@dataclass(frozen=True)
class BuildContext:
    """Read-only collaborators shared by every builder of a pipeline."""

    resolver: ConfigResolver
    scripts: ScriptProvider
    settings: GeneratorSettings = field(default_factory=GeneratorSettings)

    @property
    def generator_version(self) -> str:
        return self.settings.generator_version


@runtime_checkable
class ManifestGenerator(Protocol):
    """One step of a builder: emits zero or more manifests."""

    def generate(self) -> list[Manifest]:
        ...


def run_generators(generators: list[ManifestGenerator]) -> list[Manifest]:
    """Concatenate generator outputs, preserving order."""
    manifests: list[Manifest] = []
    for generator in generators:
        manifests.extend(generator.generate())
    return manifests


class ChainBuilder(ABC):
    """Builds all manifests for one resolved chain."""

    #: Whether chains of this family need the global keys/scripts ConfigMaps
    uses_global_configmaps: bool = False

    def __init__(self, context: BuildContext):
        self.context = context

    @abstractmethod
    def build(self, chain: ResolvedChain, network: NetworkSpec) -> list[Manifest]:
        """Build manifests for one chain, in ConfigMap, Service, workload order."""
        ...

    def build_global(self, network: NetworkSpec) -> list[Manifest]:
        """Manifests shared by every chain of this family, emitted once per run."""
        return []


class RelayerBuilder(ABC):
    """Builds all manifests for one resolved relayer."""

    #: Image used when neither the user nor the catalogue sets one
    default_image: str = ""

    #: Only some relayer implementations expose a Service
    needs_service: bool = False

    def __init__(self, context: BuildContext):
        self.context = context

    @abstractmethod
    def build(self, relayer: ResolvedRelayer, network: NetworkSpec) -> list[Manifest]:
        ...

    def image_for(self, relayer: RelayerSpec) -> str:
        return relayer.image or self.default_image


class ComponentBuilder(ABC):
    """
    Builds the manifests of one network-wide component.

    Registry, explorer, frontends and ingress are not per-chain: they take
    their own spec section plus the whole network.
    """

    def __init__(self, context: BuildContext):
        self.context = context

    @abstractmethod
    def build(self, spec: Any, network: NetworkSpec) -> list[Manifest]:
        ...

    def resolved_chains(self, network: NetworkSpec) -> list[ResolvedChain]:
        return [self.context.resolver.resolve_chain(chain) for chain in network.chains]
