"""
Block explorer builder (ping-pub).

Manifests (in order):
    ConfigMap   explorer  one <chain-id>.json per chain
    Service     explorer  http 8080
    Deployment  explorer

With ingress enabled the chain endpoints point at the public ingress
hosts, since the explorer runs in the user's browser.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.base import ComponentBuilder
from devnetgen.builders.ingress import base_host
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import ExplorerSpec, NetworkSpec, ResolvedChain

EXPLORER_IMAGE = "ghcr.io/cosmology-tech/starship/ping-pub:latest"
EXPLORER_PORT = 8080


def ingress_host(network: NetworkSpec) -> str | None:
    """The public base host when ingress is enabled, else None."""
    return base_host(network.ingress) if network.ingress_enabled else None


class ExplorerBuilder(ComponentBuilder):
    def build(self, spec: ExplorerSpec, network: NetworkSpec) -> list[Manifest]:
        if not spec.enabled:
            return []
        component_labels = helpers.component_labels(network, "explorer")
        return [
            Manifest.config_map(
                "explorer", component_labels, self.chain_data(spec, network)
            ),
            Manifest.service(
                "explorer",
                component_labels,
                {
                    "clusterIP": "None",
                    "ports": [
                        {"name": "http", "port": EXPLORER_PORT, "protocol": "TCP", "targetPort": str(EXPLORER_PORT)}
                    ],
                    "selector": {labels.NAME: "explorer"},
                },
            ),
            Manifest.deployment("explorer", component_labels, self.deployment_spec(spec, network)),
        ]

    def chain_entry(self, chain: ResolvedChain, spec: ExplorerSpec, network: NetworkSpec) -> dict[str, Any]:
        ports = helpers.chain_ports(chain)
        public_host = ingress_host(network)
        if public_host:
            api = f"https://rest.{chain.id}-genesis.{public_host}:443"
            rpc = f"https://rpc.{chain.id}-genesis.{public_host}:443"
        else:
            host = "localhost" if spec.localhost else helpers.genesis_host(chain.hostname)
            api = f"http://{host}:{ports['rest']}"
            rpc = f"http://{host}:{ports['rpc']}"
        return {
            "chain_name": chain.id,
            "coingecko": chain.name,
            "api": api,
            "rpc": [rpc],
            "snapshot_provider": "",
            "sdk_version": "0.45.6",
            "coin_type": chain.coin_type,
            "min_tx_fee": "3000",
            "addr_prefix": chain.prefix,
            "logo": "",
            "assets": [
                {
                    "base": chain.denom,
                    "symbol": (chain.prefix or "").upper(),
                    "exponent": "6",
                    "coingecko_id": chain.id,
                    "logo": "",
                }
            ],
        }

    def chain_data(self, spec: ExplorerSpec, network: NetworkSpec) -> dict[str, str]:
        return {
            f"{chain.id}.json": json.dumps(self.chain_entry(chain, spec, network))
            for chain in self.resolved_chains(network)
        }

    def deployment_spec(self, spec: ExplorerSpec, network: NetworkSpec) -> dict[str, Any]:
        return {
            "replicas": 1,
            "revisionHistoryLimit": 3,
            "selector": {"matchLabels": {labels.INSTANCE: "explorer", labels.NAME: "explorer"}},
            "template": {
                "metadata": {
                    "annotations": helpers.pod_annotations(),
                    "labels": {
                        labels.INSTANCE: "explorer",
                        labels.TYPE: spec.type,
                        labels.NAME: "explorer",
                        labels.RAWNAME: "explorer",
                        labels.VERSION: self.context.generator_version,
                    },
                },
                "spec": {
                    "containers": [
                        {
                            "name": "explorer",
                            "image": spec.image or EXPLORER_IMAGE,
                            "imagePullPolicy": network.image_pull_policy,
                            "env": [helpers.env("CHAINS_CONFIG_PATH", "/explorer")],
                            "ports": [{"name": "http", "containerPort": EXPLORER_PORT, "protocol": "TCP"}],
                            "volumeMounts": [{"name": "explorer-config", "mountPath": "/explorer"}],
                            "resources": helpers.resource_object(spec.resources),
                        }
                    ],
                    "volumes": [{"name": "explorer-config", "configMap": {"name": "explorer"}}],
                },
            },
        }
