"""Chain builders, one per chain family."""

from devnetgen.builders.chains.cosmos import CosmosChainBuilder
from devnetgen.builders.chains.ethereum import EthereumChainBuilder
from devnetgen.builders.chains.external import NonManifestChainBuilder

__all__ = [
    "CosmosChainBuilder",
    "EthereumChainBuilder",
    "NonManifestChainBuilder",
]
