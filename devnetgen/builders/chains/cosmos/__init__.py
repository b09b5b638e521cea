"""
Cosmos-SDK chain builder.

The generic chain family: any chain name without a dedicated builder is
built this way, since most Cosmos-SDK chains share one manifest shape.

Output order per chain:
    1. ConfigMaps   (setup-scripts, genesis patch, ICS proposal)
    2. Services     (genesis, validator)
    3. StatefulSets (genesis, validator)

The network-wide keys and setup-scripts ConfigMaps are not emitted here;
the aggregator emits them once for every builder that sets
uses_global_configmaps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from devnetgen.builders.base import ChainBuilder, run_generators
from devnetgen.builders.chains.cosmos.configmap import (
    CosmosConfigMapGenerator,
    GlobalConfigMapGenerator,
)
from devnetgen.builders.chains.cosmos.service import CosmosServiceGenerator
from devnetgen.builders.chains.cosmos.statefulset import CosmosStatefulSetGenerator

if TYPE_CHECKING:
    from devnetgen.schemas.manifest import Manifest
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain


class CosmosChainBuilder(ChainBuilder):
    uses_global_configmaps = True

    def build(self, chain: ResolvedChain, network: NetworkSpec) -> list[Manifest]:
        return run_generators(
            [
                CosmosConfigMapGenerator(chain, network, self.context),
                CosmosServiceGenerator(chain, network),
                CosmosStatefulSetGenerator(chain, network, self.context),
            ]
        )

    def build_global(self, network: NetworkSpec) -> list[Manifest]:
        """Network-wide ConfigMaps shared by every Cosmos chain."""
        return GlobalConfigMapGenerator(network, self.context).generate()


__all__ = [
    "CosmosChainBuilder",
    "CosmosConfigMapGenerator",
    "CosmosServiceGenerator",
    "CosmosStatefulSetGenerator",
    "GlobalConfigMapGenerator",
]
