"""
Manifest builders for devnetgen.

Per-entity builders (chains, relayers), the network-wide component
builders (registry, explorer, frontend, ingress) and the factory that
dispatches entities to builders.
"""

from .base import BuildContext, ChainBuilder, ComponentBuilder, RelayerBuilder, run_generators
from .explorer import ExplorerBuilder
from .factory import ChainFamily, EntityBuilderFactory, RelayerType, chain_family
from .frontend import FrontendBuilder
from .ingress import IngressBuilder
from .registry import RegistryBuilder

__all__ = [
    "BuildContext",
    "ChainBuilder",
    "ChainFamily",
    "ComponentBuilder",
    "EntityBuilderFactory",
    "ExplorerBuilder",
    "FrontendBuilder",
    "IngressBuilder",
    "RegistryBuilder",
    "RelayerBuilder",
    "RelayerType",
    "chain_family",
    "run_generators",
]
