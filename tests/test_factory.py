"""
Tests for the entity builder factory.
"""

import pytest

from devnetgen.builders import ChainFamily, EntityBuilderFactory, chain_family
from devnetgen.builders.chains import CosmosChainBuilder, EthereumChainBuilder, NonManifestChainBuilder
from devnetgen.builders.relayers import (
    GoRelayerBuilder,
    HermesRelayerBuilder,
    NeutronQueryRelayerBuilder,
    TsRelayerBuilder,
)
from devnetgen.errors import ConfigurationError, UnsupportedRelayerTypeError

# =============================================================================
# Chains
# =============================================================================


class TestChainDispatch:
    """Tests for chain name to builder dispatch."""

    @pytest.mark.parametrize(
        "name,family",
        [
            ("ethereum", ChainFamily.ETHEREUM),
            ("solana", ChainFamily.NON_MANIFEST),
            ("osmosis", ChainFamily.COSMOS),
            ("made-up-chain", ChainFamily.COSMOS),
        ],
    )
    def test_chain_family(self, name, family):
        """Unknown names fall back to the cosmos family."""
        assert chain_family(name) == family

    def test_builder_classes(self, context):
        """Each family maps to its builder."""
        factory = EntityBuilderFactory(context)

        assert isinstance(factory.chain_builder_for("osmosis"), CosmosChainBuilder)
        assert isinstance(factory.chain_builder_for("ethereum"), EthereumChainBuilder)
        assert isinstance(factory.chain_builder_for("solana"), NonManifestChainBuilder)

    def test_fallback_never_raises(self, context):
        """A chain name nobody registered still gets a builder."""
        factory = EntityBuilderFactory(context)
        assert isinstance(factory.chain_builder_for("unheard-of"), CosmosChainBuilder)

    def test_builders_are_cached(self, context):
        """Chains of one family share a builder instance."""
        factory = EntityBuilderFactory(context)
        assert factory.chain_builder_for("osmosis") is factory.chain_builder_for("juno")

    def test_registered_chain_names(self, context):
        factory = EntityBuilderFactory(context)
        assert factory.registered_chain_names == ["ethereum", "solana"]


# =============================================================================
# Relayers
# =============================================================================


class TestRelayerDispatch:
    """Tests for relayer type to builder dispatch."""

    @pytest.mark.parametrize(
        "relayer_type,builder_class",
        [
            ("hermes", HermesRelayerBuilder),
            ("go-relayer", GoRelayerBuilder),
            ("ts-relayer", TsRelayerBuilder),
            ("neutron-query-relayer", NeutronQueryRelayerBuilder),
        ],
    )
    def test_known_types(self, context, relayer_type, builder_class):
        factory = EntityBuilderFactory(context)
        assert isinstance(factory.relayer_builder_for(relayer_type), builder_class)

    def test_unknown_type_raises(self, context):
        """Unknown relayer types are rejected with the supported list."""
        factory = EntityBuilderFactory(context)

        with pytest.raises(UnsupportedRelayerTypeError) as exc_info:
            factory.relayer_builder_for("carrier-pigeon", entity="carrier-pigeon-x")

        error = exc_info.value
        assert error.relayer_type == "carrier-pigeon"
        assert "hermes" in error.available
        assert str(error).startswith("[carrier-pigeon-x] Unsupported relayer type: carrier-pigeon")

    def test_unknown_type_is_configuration_error(self, context):
        factory = EntityBuilderFactory(context)
        with pytest.raises(ConfigurationError):
            factory.relayer_builder_for("")

    def test_registered_relayer_types(self, context):
        factory = EntityBuilderFactory(context)
        assert factory.registered_relayer_types == [
            "hermes",
            "go-relayer",
            "ts-relayer",
            "neutron-query-relayer",
        ]
