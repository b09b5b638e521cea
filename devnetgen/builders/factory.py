"""
Entity Builder Factory.

Maps entity discriminants (chain name, relayer type) to builder classes.

Design Principle:
    The dispatch tables are closed: chain families and relayer types are
    enums, and the tables are read-only mappings built at import time.
    Adding a new kind means adding an enum member and a table entry.

    Chains fall back to the cosmos builder on a miss, since most chains
    share its manifest shape. Relayers have no safe generic shape, so a
    miss is an UnsupportedRelayerTypeError.

Usage:
    factory = EntityBuilderFactory(context)
    factory.chain_builder_for("osmosis")   # CosmosChainBuilder
    factory.chain_builder_for("ethereum")  # EthereumChainBuilder
    factory.relayer_builder_for("hermes")  # HermesRelayerBuilder
    factory.relayer_builder_for("foo")     # raises UnsupportedRelayerTypeError
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from devnetgen.builders.chains import (
    CosmosChainBuilder,
    EthereumChainBuilder,
    NonManifestChainBuilder,
)
from devnetgen.builders.relayers import (
    GoRelayerBuilder,
    HermesRelayerBuilder,
    NeutronQueryRelayerBuilder,
    TsRelayerBuilder,
)
from devnetgen.errors import UnsupportedRelayerTypeError

if TYPE_CHECKING:
    from devnetgen.builders.base import BuildContext, ChainBuilder, RelayerBuilder

logger = logging.getLogger(__name__)


class ChainFamily(str, Enum):
    """Manifest shape shared by a group of chains."""

    COSMOS = "cosmos"
    ETHEREUM = "ethereum"
    NON_MANIFEST = "non-manifest"


class RelayerType(str, Enum):
    HERMES = "hermes"
    GO_RELAYER = "go-relayer"
    TS_RELAYER = "ts-relayer"
    NEUTRON_QUERY_RELAYER = "neutron-query-relayer"


#: Chain names with a non-default family; every other name is cosmos
CHAIN_FAMILIES: MappingProxyType[str, ChainFamily] = MappingProxyType(
    {
        "ethereum": ChainFamily.ETHEREUM,
        "solana": ChainFamily.NON_MANIFEST,
    }
)

CHAIN_BUILDERS: MappingProxyType[ChainFamily, type[ChainBuilder]] = MappingProxyType(
    {
        ChainFamily.COSMOS: CosmosChainBuilder,
        ChainFamily.ETHEREUM: EthereumChainBuilder,
        ChainFamily.NON_MANIFEST: NonManifestChainBuilder,
    }
)

RELAYER_BUILDERS: MappingProxyType[RelayerType, type[RelayerBuilder]] = MappingProxyType(
    {
        RelayerType.HERMES: HermesRelayerBuilder,
        RelayerType.GO_RELAYER: GoRelayerBuilder,
        RelayerType.TS_RELAYER: TsRelayerBuilder,
        RelayerType.NEUTRON_QUERY_RELAYER: NeutronQueryRelayerBuilder,
    }
)


def chain_family(chain_name: str) -> ChainFamily:
    return CHAIN_FAMILIES.get(chain_name, ChainFamily.COSMOS)


class EntityBuilderFactory:
    """
    Creates builders for chains and relayers.

    Builder instances are cached per class, so every chain of one family
    shares a builder within a run. Builders are stateless apart from the
    shared context, so this is safe.
    """

    def __init__(self, context: BuildContext):
        self.context = context
        self._chain_builders: dict[ChainFamily, ChainBuilder] = {}
        self._relayer_builders: dict[RelayerType, RelayerBuilder] = {}

    # ==================== Chains ====================

    def chain_builder_for(self, chain_name: str) -> ChainBuilder:
        """Get the builder for a chain name, falling back to cosmos."""
        family = chain_family(chain_name)
        if family not in self._chain_builders:
            self._chain_builders[family] = CHAIN_BUILDERS[family](self.context)
            logger.debug(f"[factory] Chain builder for family '{family.value}' created")
        return self._chain_builders[family]

    @property
    def registered_chain_names(self) -> list[str]:
        return list(CHAIN_FAMILIES)

    # ==================== Relayers ====================

    def relayer_builder_for(self, relayer_type: str, entity: str | None = None) -> RelayerBuilder:
        """
        Get the builder for a relayer type.

        Raises:
            UnsupportedRelayerTypeError: If no builder handles the type
        """
        try:
            key = RelayerType(relayer_type)
        except ValueError:
            raise UnsupportedRelayerTypeError(
                relayer_type, self.registered_relayer_types, entity
            ) from None
        if key not in self._relayer_builders:
            self._relayer_builders[key] = RELAYER_BUILDERS[key](self.context)
        return self._relayer_builders[key]

    @property
    def registered_relayer_types(self) -> list[str]:
        return [relayer_type.value for relayer_type in RELAYER_BUILDERS]
