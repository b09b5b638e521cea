"""
Headless Services for Cosmos-SDK chains.

<hostname>-genesis always exists; <hostname>-validator only when the chain
runs more than one validator, mirroring the StatefulSet pair.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from devnetgen.builders import helpers
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain


class CosmosNodeServiceGenerator:
    """Headless Service selecting the pods of one node role."""

    def __init__(self, chain: ResolvedChain, network: NetworkSpec, role: str):
        self.chain = chain
        self.network = network
        self.role = role

    @property
    def name(self) -> str:
        return f"{self.chain.hostname}-{self.role}"

    def generate(self) -> list[Manifest]:
        ports = helpers.service_ports(helpers.chain_ports(self.chain))
        if self.chain.metrics:
            ports.append(
                {
                    "name": "metrics",
                    "port": helpers.METRICS_PORT,
                    "protocol": "TCP",
                    "targetPort": str(helpers.METRICS_PORT),
                }
            )

        service_labels = helpers.chain_labels(self.chain, self.network, self.role, name=self.name)
        service_labels[labels.TYPE] = f"{self.chain.id}-service"

        return [
            Manifest.service(
                self.name,
                service_labels,
                {
                    "clusterIP": "None",
                    "ports": ports,
                    "selector": {labels.NAME: self.name},
                },
            )
        ]


class CosmosServiceGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec):
        self.generators = [CosmosNodeServiceGenerator(chain, network, "genesis")]
        if chain.num_validators > 1:
            self.generators.append(CosmosNodeServiceGenerator(chain, network, "validator"))

    def generate(self) -> list[Manifest]:
        manifests: list[Manifest] = []
        for generator in self.generators:
            manifests.extend(generator.generate())
        return manifests
