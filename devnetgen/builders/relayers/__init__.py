"""Relayer builders, one per relayer implementation."""

from devnetgen.builders.relayers.base import BaseRelayerBuilder, address_type, gas_price
from devnetgen.builders.relayers.go_relayer import GoRelayerBuilder
from devnetgen.builders.relayers.hermes import HermesRelayerBuilder
from devnetgen.builders.relayers.neutron_query import NeutronQueryRelayerBuilder
from devnetgen.builders.relayers.ts_relayer import TsRelayerBuilder

__all__ = [
    "BaseRelayerBuilder",
    "GoRelayerBuilder",
    "HermesRelayerBuilder",
    "NeutronQueryRelayerBuilder",
    "TsRelayerBuilder",
    "address_type",
    "gas_price",
]
