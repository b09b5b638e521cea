"""StatefulSets for Cosmos-SDK chains: genesis always, validators when N > 1."""

from __future__ import annotations

from typing import TYPE_CHECKING

from devnetgen.builders.base import run_generators
from devnetgen.builders.chains.cosmos.genesis import CosmosGenesisStatefulSetGenerator
from devnetgen.builders.chains.cosmos.validator import CosmosValidatorStatefulSetGenerator

if TYPE_CHECKING:
    from devnetgen.builders.base import BuildContext, ManifestGenerator
    from devnetgen.schemas.manifest import Manifest
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain


class CosmosStatefulSetGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec, context: BuildContext):
        self.generators: list[ManifestGenerator] = [
            CosmosGenesisStatefulSetGenerator(chain, network, context)
        ]
        if chain.num_validators > 1:
            self.generators.append(CosmosValidatorStatefulSetGenerator(chain, network, context))

    def generate(self) -> list[Manifest]:
        return run_generators(self.generators)
