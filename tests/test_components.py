"""
Tests for the network-wide component builders.

Tests for:
- RegistryBuilder
- ExplorerBuilder
- FrontendBuilder
- IngressBuilder
"""

import json

import pytest

from devnetgen.builders import ExplorerBuilder, FrontendBuilder, IngressBuilder, RegistryBuilder
from devnetgen.builders.ingress import base_host, issuer_name
from devnetgen.schemas import NetworkSpec
from devnetgen.schemas.network import IngressSpec

# =============================================================================
# Helpers
# =============================================================================


def network_with(**extra) -> NetworkSpec:
    return NetworkSpec.model_validate(
        {
            "name": "devnet",
            "chains": [
                {"id": "osmosis-1", "name": "osmosis"},
                {"id": "cosmoshub_4", "name": "cosmoshub"},
            ],
            **extra,
        }
    )


def env_of(container: dict) -> dict:
    return {entry["name"]: entry.get("value") for entry in container["env"]}


# =============================================================================
# Registry
# =============================================================================


class TestRegistryBuilder:
    """Tests for the chain registry."""

    def test_disabled_emits_nothing(self, context):
        network = network_with(registry={"enabled": False})
        assert RegistryBuilder(context).build(network.registry, network) == []

    def test_manifests(self, context):
        """Registry emits ConfigMap, Service and Deployment."""
        network = network_with(registry={"enabled": True})
        manifests = RegistryBuilder(context).build(network.registry, network)

        assert [(m.kind, m.name) for m in manifests] == [
            ("ConfigMap", "registry-config"),
            ("Service", "registry"),
            ("Deployment", "registry"),
        ]
        assert all(m.component == "registry" for m in manifests)

    def test_config_keys_use_hostnames(self, context):
        """Chain and asset files are keyed by hostname and never collide."""
        network = network_with(registry={"enabled": True})
        config_map = RegistryBuilder(context).build(network.registry, network)[0]

        assert sorted(config_map.data) == [
            "cosmoshub-4-assetlist.json",
            "cosmoshub-4.json",
            "osmosis-1-assetlist.json",
            "osmosis-1.json",
        ]
        chain = json.loads(config_map.data["osmosis-1.json"])
        assert chain["bech32_prefix"] == "osmo"
        assert chain["pretty_name"] == "Osmosis"

    def test_deployment_env(self, context):
        """Chain ids and endpoints are passed as comma-separated env vars."""
        network = network_with(registry={"enabled": True})
        deployment = RegistryBuilder(context).build(network.registry, network)[2]

        container = deployment.spec["template"]["spec"]["containers"][0]
        env = env_of(container)
        assert env["REGISTRY_CHAIN_CLIENT_IDS"] == "osmosis-1,cosmoshub_4"
        assert env["REGISTRY_CHAIN_CLIENT_NAMES"] == "osmosis,cosmoshub"
        assert env["REGISTRY_CHAIN_REGISTRY"] == "/configs"
        assert env["REGISTRY_CHAIN_CLIENT_EXPOSERS"].endswith(":8081")
        assert container["readinessProbe"]["httpGet"]["path"] == "/health"


# =============================================================================
# Explorer
# =============================================================================


class TestExplorerBuilder:
    """Tests for the ping-pub explorer."""

    def test_disabled_emits_nothing(self, context):
        network = network_with(explorer={"enabled": False})
        assert ExplorerBuilder(context).build(network.explorer, network) == []

    def test_manifests(self, context):
        network = network_with(explorer={"enabled": True})
        manifests = ExplorerBuilder(context).build(network.explorer, network)

        assert [(m.kind, m.name) for m in manifests] == [
            ("ConfigMap", "explorer"),
            ("Service", "explorer"),
            ("Deployment", "explorer"),
        ]
        assert sorted(manifests[0].data) == ["cosmoshub_4.json", "osmosis-1.json"]

    def test_in_cluster_endpoints(self, context):
        """Without ingress the explorer uses in-cluster addresses."""
        network = network_with(explorer={"enabled": True})
        config_map = ExplorerBuilder(context).build(network.explorer, network)[0]

        entry = json.loads(config_map.data["osmosis-1.json"])
        assert entry["api"] == "http://osmosis-1-genesis.$(NAMESPACE).svc.cluster.local:1317"

    def test_localhost_endpoints(self, context):
        network = network_with(explorer={"enabled": True, "localhost": True})
        config_map = ExplorerBuilder(context).build(network.explorer, network)[0]

        entry = json.loads(config_map.data["osmosis-1.json"])
        assert entry["api"] == "http://localhost:1317"
        assert entry["rpc"] == ["http://localhost:26657"]

    def test_ingress_endpoints(self, context):
        """With ingress enabled the explorer points at public hosts."""
        network = network_with(
            explorer={"enabled": True},
            ingress={"enabled": True, "host": "*.devnet.example.com"},
        )
        config_map = ExplorerBuilder(context).build(network.explorer, network)[0]

        entry = json.loads(config_map.data["osmosis-1.json"])
        assert entry["api"] == "https://rest.osmosis-1-genesis.devnet.example.com:443"


# =============================================================================
# Frontends
# =============================================================================


class TestFrontendBuilder:
    """Tests for user frontends."""

    def frontend(self, **extra):
        return {"name": "dashboard", "image": "example/dashboard:1.0", "ports": {"rest": 3000}, **extra}

    def test_service_and_deployment(self, context):
        network = network_with(frontends=[self.frontend()])
        manifests = FrontendBuilder(context).build(network.frontends[0], network)

        assert [(m.kind, m.name) for m in manifests] == [
            ("Service", "dashboard"),
            ("Deployment", "dashboard"),
        ]
        assert manifests[0].spec["clusterIP"] == "None"
        assert manifests[0].spec["ports"][0]["port"] == 3000

    def test_defaults(self, context):
        """Replicas default to 1 with small default resources."""
        network = network_with(frontends=[self.frontend()])
        deployment = FrontendBuilder(context).build(network.frontends[0], network)[1]

        assert deployment.spec["replicas"] == 1
        container = deployment.spec["template"]["spec"]["containers"][0]
        assert container["resources"]["limits"] == {"cpu": "0.2", "memory": "200M"}

    def test_env_passthrough(self, context):
        network = network_with(frontends=[self.frontend(env={"API_URL": "http://registry:8080"})])
        deployment = FrontendBuilder(context).build(network.frontends[0], network)[1]

        container = deployment.spec["template"]["spec"]["containers"][0]
        assert env_of(container) == {"API_URL": "http://registry:8080"}


# =============================================================================
# Ingress
# =============================================================================


class TestIngressHelpers:
    """Tests for host and issuer defaults."""

    @pytest.mark.parametrize(
        "host,expected",
        [
            ("*.devnet.example.com", "devnet.example.com"),
            ("devnet.example.com", "devnet.example.com"),
            (None, "thestarship.io"),
        ],
    )
    def test_base_host(self, host, expected):
        assert base_host(IngressSpec(enabled=True, host=host)) == expected

    def test_issuer_default(self):
        assert issuer_name(IngressSpec(enabled=True)) == "cert-issuer"

    def test_issuer_override(self):
        spec = IngressSpec.model_validate({"enabled": True, "certManager": {"issuer": "letsencrypt"}})
        assert issuer_name(spec) == "letsencrypt"


class TestIngressBuilder:
    """Tests for the Issuer and Ingress manifests."""

    def test_disabled_emits_nothing(self, context):
        network = network_with(ingress={"enabled": False})
        assert IngressBuilder(context).build(network.ingress, network) == []

    def test_issuer_then_ingress(self, context):
        network = network_with(ingress={"enabled": True})
        manifests = IngressBuilder(context).build(network.ingress, network)

        assert [(m.api_version, m.kind, m.name) for m in manifests] == [
            ("cert-manager.io/v1", "Issuer", "cert-issuer"),
            ("networking.k8s.io/v1", "Ingress", "nginx-ingress"),
        ]
        assert manifests[1].annotations["cert-manager.io/issuer"] == "cert-issuer"

    def test_chain_rules(self, context):
        """Chain hosts use the chain id; backends use the service hostname."""
        network = network_with(ingress={"enabled": True, "host": "*.example.com"})
        ingress = IngressBuilder(context).build(network.ingress, network)[1]

        rules = {rule["host"]: rule for rule in ingress.spec["rules"]}
        rest = rules["rest.cosmoshub_4-genesis.example.com"]
        backends = [path["backend"]["service"]["name"] for path in rest["http"]["paths"]]
        assert backends == ["cosmoshub-4-genesis"] * 3
        assert "rpc.osmosis-1-genesis.example.com" in rules

    def test_service_rules(self, context):
        """Explorer, registry, hermes and frontends get their own hosts."""
        network = network_with(
            ingress={"enabled": True, "host": "example.com"},
            explorer={"enabled": True},
            registry={"enabled": True},
            relayers=[{"name": "link", "type": "hermes", "chains": ["osmosis-1", "cosmoshub_4"]}],
            frontends=[{"name": "dashboard", "image": "example/dashboard:1.0"}],
        )
        ingress = IngressBuilder(context).build(network.ingress, network)[1]

        hosts = [rule["host"] for rule in ingress.spec["rules"]]
        assert hosts[:2] == ["explorer.example.com", "registry.example.com"]
        assert "rest.hermes-link.example.com" in hosts
        assert hosts[-1] == "dashboard.example.com"

    def test_tls_secret_names(self, context):
        network = network_with(ingress={"enabled": True, "host": "example.com"}, explorer={"enabled": True})
        ingress = IngressBuilder(context).build(network.ingress, network)[1]

        tls = ingress.spec["tls"][0]
        assert tls == {"hosts": ["explorer.example.com"], "secretName": "explorer.nginx-ingress-tls"}
