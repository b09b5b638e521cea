"""
Tests for relayer builders.

Tests for:
- HermesRelayerBuilder
- GoRelayerBuilder
- TsRelayerBuilder
- NeutronQueryRelayerBuilder
- address_type / gas_price helpers
"""

import json

import pytest
import yaml

from devnetgen.builders.relayers import (
    GoRelayerBuilder,
    HermesRelayerBuilder,
    NeutronQueryRelayerBuilder,
    TsRelayerBuilder,
    address_type,
    gas_price,
)
from devnetgen.builders.relayers.hermes import cli_config
from devnetgen.errors import UnknownChainReferenceError
from devnetgen.schemas import NetworkSpec, RelayerSpec

# =============================================================================
# Helpers
# =============================================================================

CHAINS = [
    {"id": "osmosis-1", "name": "osmosis"},
    {"id": "cosmoshub-4", "name": "cosmoshub"},
    {"id": "neutron-1", "name": "neutron"},
]


def build_relayer(context, builder_class, relayer: dict):
    network = NetworkSpec.model_validate({"name": "devnet", "chains": CHAINS, "relayers": [relayer]})
    resolved = context.resolver.resolve_relayer(RelayerSpec.model_validate(relayer))
    return builder_class(context).build(resolved, network)


def hermes(**extra):
    return {"name": "osmos-cosmos", "type": "hermes", "chains": ["osmosis-1", "cosmoshub-4"], **extra}


# =============================================================================
# Hermes
# =============================================================================


class TestHermesRelayerBuilder:
    """Tests for the hermes relayer."""

    def test_manifests_in_order(self, context):
        """Hermes emits ConfigMap, Service and StatefulSet."""
        manifests = build_relayer(context, HermesRelayerBuilder, hermes())

        assert [(m.kind, m.name) for m in manifests] == [
            ("ConfigMap", "hermes-osmos-cosmos"),
            ("Service", "hermes-osmos-cosmos"),
            ("StatefulSet", "hermes-osmos-cosmos"),
        ]
        for manifest in manifests:
            assert manifest.component == "relayer"
            assert manifest.role == "hermes"

    def test_config_toml_lists_chains(self, context):
        """config.toml has one [[chains]] section per linked chain."""
        config_map = build_relayer(context, HermesRelayerBuilder, hermes())[0]

        config = config_map.data["config.toml"]
        assert config.count("[[chains]]") == 2
        assert 'id = "osmosis-1"' in config
        assert 'account_prefix = "osmo"' in config
        assert "osmosis-1-genesis.$(NAMESPACE).svc.cluster.local:26657" in config

    def test_cli_config_suffixes_key_names(self, context):
        """The CLI copy uses separate -cli keys."""
        config_map = build_relayer(context, HermesRelayerBuilder, hermes())[0]

        cli = config_map.data["config-cli.toml"]
        assert 'key_name = "osmosis-1-cli"' in cli
        assert 'key_name = "cosmoshub-4-cli"' in cli
        assert 'key_name = "osmosis-1"\n' not in cli

    def test_cli_config_only_touches_key_names(self):
        """Lines other than key_name are unchanged."""
        assert cli_config('id = "a"\nkey_name = "a"\n') == 'id = "a"\nkey_name = "a-cli"\n'

    def test_user_config_overrides_defaults(self, context):
        """Relayer config sections flow into config.toml."""
        relayer = hermes(config={"global": {"log_level": "debug"}, "event_source": {"mode": "pull"}})
        config = build_relayer(context, HermesRelayerBuilder, relayer)[0].data["config.toml"]

        assert 'log_level = "debug"' in config
        assert "mode = 'pull'" in config

    def test_exposer_sidecar(self, context):
        """Hermes pods run an exposer sidecar fed by init-exposer."""
        statefulset = build_relayer(context, HermesRelayerBuilder, hermes())[2]

        pod = statefulset.spec["template"]["spec"]
        assert pod["initContainers"][0]["name"] == "init-exposer"
        assert [c["name"] for c in pod["containers"]] == ["relayer", "exposer"]
        assert {"name": "exposer", "emptyDir": {}} in pod["volumes"]

    def test_service_ports(self, context):
        """The Service exposes rest and exposer ports."""
        service = build_relayer(context, HermesRelayerBuilder, hermes())[1]
        assert [p["name"] for p in service.spec["ports"]] == ["rest", "exposer"]

    def test_default_image(self, context):
        """The catalogue image is used when the user sets none."""
        statefulset = build_relayer(context, HermesRelayerBuilder, hermes())[2]

        relayer = statefulset.spec["template"]["spec"]["containers"][0]
        assert relayer["image"].endswith("hermes:1.10.0")

    def test_user_image_wins(self, context):
        """An explicit image overrides the default."""
        statefulset = build_relayer(context, HermesRelayerBuilder, hermes(image="hermes:custom"))[2]

        relayer = statefulset.spec["template"]["spec"]["containers"][0]
        assert relayer["image"] == "hermes:custom"

    def test_replicas(self, context):
        """Replicas come from the resolved relayer."""
        statefulset = build_relayer(context, HermesRelayerBuilder, hermes(replicas=2))[2]
        assert statefulset.spec["replicas"] == 2

    def test_unknown_chain_raises(self, context):
        """A chain id missing from the network is a hard error."""
        relayer = hermes(chains=["osmosis-1", "juno-1"])

        with pytest.raises(UnknownChainReferenceError, match="Chain juno-1 not found"):
            build_relayer(context, HermesRelayerBuilder, relayer)


# =============================================================================
# Go relayer
# =============================================================================


class TestGoRelayerBuilder:
    """Tests for the go relayer."""

    def relayer(self, **extra):
        return {"name": "osmo-hub", "type": "go-relayer", "chains": ["osmosis-1", "cosmoshub-4"], **extra}

    def test_no_service(self, context):
        """The go relayer has no Service."""
        manifests = build_relayer(context, GoRelayerBuilder, self.relayer())
        assert [m.kind for m in manifests] == ["ConfigMap", "StatefulSet"]

    def test_default_path_links_first_two_chains(self, context):
        """Without channels one transfer path links the first two chains."""
        config_map = build_relayer(context, GoRelayerBuilder, self.relayer())[0]

        paths = json.loads(config_map.data["path.json"])["paths"]
        assert list(paths) == ["path"]
        assert paths["path"]["src"]["chain-id"] == "osmosis-1"
        assert paths["path"]["dst"]["chain-id"] == "cosmoshub-4"
        assert paths["path"]["src"]["port-id"] == "transfer"

    def test_explicit_channels(self, context):
        """Each declared channel becomes its own path."""
        channels = [
            {"a-chain": "osmosis-1", "b-chain": "cosmoshub-4", "a-port": "transfer", "b-port": "transfer"},
            {"a-chain": "osmosis-1", "b-chain": "cosmoshub-4", "a-port": "icahost", "b-port": "icacontroller"},
        ]
        config_map = build_relayer(context, GoRelayerBuilder, self.relayer(channels=channels))[0]

        paths = json.loads(config_map.data["path.json"])["paths"]
        assert list(paths) == ["path0", "path1"]
        assert paths["path1"]["dst"]["port-id"] == "icacontroller"

    def test_chain_files(self, context):
        """Each chain gets a <chain-id>.json config."""
        config_map = build_relayer(context, GoRelayerBuilder, self.relayer())[0]

        chain = json.loads(config_map.data["cosmoshub-4.json"])
        assert chain["value"]["account-prefix"] == "cosmos"
        assert chain["value"]["gas-prices"] == "0.01uatom"


# =============================================================================
# TS relayer
# =============================================================================


class TestTsRelayerBuilder:
    """Tests for the TypeScript relayer."""

    def test_app_and_registry_yaml(self, context):
        """The ConfigMap holds parseable app.yaml and registry.yaml."""
        relayer = {"name": "ts", "type": "ts-relayer", "chains": ["osmosis-1", "cosmoshub-4"]}
        manifests = build_relayer(context, TsRelayerBuilder, relayer)

        assert [m.kind for m in manifests] == ["ConfigMap", "StatefulSet"]
        app = yaml.safe_load(manifests[0].data["app.yaml"])
        registry = yaml.safe_load(manifests[0].data["registry.yaml"])
        assert list(app["chains"]) == ["osmosis-1", "cosmoshub-4"]
        assert [c["chain_id"] for c in registry["chains"]] == ["osmosis-1", "cosmoshub-4"]


# =============================================================================
# Neutron query relayer
# =============================================================================


class TestNeutronQueryRelayerBuilder:
    """Tests for the neutron interchain-query relayer."""

    def relayer(self, **extra):
        return {
            "name": "icq",
            "type": "neutron-query-relayer",
            "chains": ["cosmoshub-4", "neutron-1"],
            **extra,
        }

    def test_manifests_with_service(self, context):
        """The query relayer exposes a metrics Service."""
        manifests = build_relayer(context, NeutronQueryRelayerBuilder, self.relayer())

        assert [m.kind for m in manifests] == ["ConfigMap", "Service", "StatefulSet"]
        assert manifests[1].spec["ports"][0]["port"] == 9090

    def test_neutron_side_detected(self, context):
        """The neutron chain is picked regardless of declaration order."""
        config_map = build_relayer(context, NeutronQueryRelayerBuilder, self.relayer())[0]

        config = json.loads(config_map.data["config.json"])["relayer"]
        assert config["neutron_chain"]["chain_id"] == "neutron-1"
        assert config["target_chain"]["chain_id"] == "cosmoshub-4"

    def test_metrics_port_from_config(self, context):
        """config.metrics_port overrides the default."""
        manifests = build_relayer(
            context, NeutronQueryRelayerBuilder, self.relayer(config={"metrics_port": 9191})
        )
        assert manifests[1].spec["ports"][0]["port"] == 9191


# =============================================================================
# Hermes chain helpers
# =============================================================================


class TestHermesChainHelpers:
    """Tests for per-chain address and gas settings."""

    @pytest.mark.parametrize("name", ["evmos", "injective"])
    def test_ethermint_chains(self, name):
        """Ethermint chains use ethermint derivation and high gas."""
        assert "derivation = 'ethermint'" in address_type(name)
        assert "price = 2500000" in gas_price(name, "aevmos")

    def test_cosmos_chains(self):
        """Other chains use cosmos derivation."""
        assert address_type("osmosis") == "address_type = { derivation = 'cosmos' }"
        assert gas_price("osmosis", "uosmo") == 'gas_price = { price = 1.25, denom = "uosmo" }'
