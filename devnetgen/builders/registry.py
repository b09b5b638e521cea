"""
Chain registry builder.

Serves chain metadata and asset lists for every chain in the network.

Manifests (in order):
    ConfigMap   registry-config  <hostname>.json and <hostname>-assetlist.json
    Service     registry         http 8080, grpc 9090
    Deployment  registry
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.base import ComponentBuilder
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import NetworkSpec, RegistrySpec, ResolvedChain

REGISTRY_IMAGE = "ghcr.io/cosmology-tech/starship/registry:latest"
REGISTRY_HTTP_PORT = 8080
REGISTRY_GRPC_PORT = 9090


class RegistryBuilder(ComponentBuilder):
    def build(self, spec: RegistrySpec, network: NetworkSpec) -> list[Manifest]:
        if not spec.enabled:
            return []
        chains = self.resolved_chains(network)
        component_labels = helpers.component_labels(network, "registry")
        return [
            Manifest.config_map("registry-config", component_labels, self.chain_data(chains)),
            Manifest.service("registry", component_labels, self.service_spec()),
            Manifest.deployment(
                "registry", component_labels, self.deployment_spec(spec, network, chains)
            ),
        ]

    def chain_data(self, chains: list[ResolvedChain]) -> dict[str, str]:
        data: dict[str, str] = {}
        for chain in chains:
            data[f"{chain.hostname}.json"] = json.dumps(
                {
                    "chain_name": chain.name,
                    "chain_id": chain.id,
                    "pretty_name": chain.pretty_name or chain.name,
                    "bech32_prefix": chain.prefix,
                    "api": {
                        "rpc": helpers.chain_address(chain.hostname, "rpc"),
                        "grpc": helpers.chain_address(chain.hostname, "grpc"),
                        "rest": helpers.chain_address(chain.hostname, "rest"),
                    },
                    "assets": chain.assets or [],
                }
            )
            data[f"{chain.hostname}-assetlist.json"] = json.dumps(
                {"chain_name": chain.name, "assets": chain.assets or []}
            )
        return data

    def service_spec(self) -> dict[str, Any]:
        return {
            "selector": {labels.NAME: "registry"},
            "ports": [
                {"name": "http", "port": REGISTRY_HTTP_PORT, "protocol": "TCP", "targetPort": str(REGISTRY_HTTP_PORT)},
                {"name": "grpc", "port": REGISTRY_GRPC_PORT, "protocol": "TCP", "targetPort": str(REGISTRY_GRPC_PORT)},
            ],
        }

    def deployment_spec(
        self, spec: RegistrySpec, network: NetworkSpec, chains: list[ResolvedChain]
    ) -> dict[str, Any]:
        rpcs = helpers.chain_addresses(chains, "rpc")
        health_probe = {"httpGet": {"path": "/health", "port": str(REGISTRY_HTTP_PORT)}}
        return {
            "replicas": 1,
            "revisionHistoryLimit": 3,
            "selector": {
                "matchLabels": {labels.INSTANCE: "registry", labels.NAME: "registry"}
            },
            "template": {
                "metadata": {
                    "annotations": helpers.pod_annotations(),
                    "labels": {
                        labels.INSTANCE: "registry",
                        labels.NAME: "registry",
                        labels.RAWNAME: "registry",
                        labels.VERSION: self.context.generator_version,
                    },
                },
                "spec": {
                    "containers": [
                        {
                            "name": "registry",
                            "image": spec.image or REGISTRY_IMAGE,
                            "imagePullPolicy": network.image_pull_policy,
                            "ports": [
                                {"name": "http", "containerPort": REGISTRY_HTTP_PORT},
                                {"name": "grpc", "containerPort": REGISTRY_GRPC_PORT},
                            ],
                            "env": [
                                helpers.env("REGISTRY_CHAIN_CLIENT_IDS", ",".join(c.id for c in chains)),
                                helpers.env("REGISTRY_CHAIN_CLIENT_NAMES", ",".join(c.name for c in chains)),
                                helpers.env("REGISTRY_CHAIN_CLIENT_RPCS", rpcs),
                                helpers.env("REGISTRY_CHAIN_API_RPCS", rpcs),
                                helpers.env("REGISTRY_CHAIN_API_GRPCS", helpers.chain_addresses(chains, "grpc")),
                                helpers.env("REGISTRY_CHAIN_API_RESTS", helpers.chain_addresses(chains, "rest")),
                                helpers.env(
                                    "REGISTRY_CHAIN_CLIENT_EXPOSERS",
                                    helpers.exposer_addresses(chains, network),
                                ),
                                helpers.env("REGISTRY_CHAIN_REGISTRY", "/configs"),
                                helpers.namespace_env(),
                            ],
                            "volumeMounts": [{"name": "registry-config", "mountPath": "/configs"}],
                            "resources": helpers.resource_object(spec.resources),
                            "readinessProbe": {
                                **health_probe,
                                "initialDelaySeconds": 5,
                                "periodSeconds": 10,
                            },
                            "livenessProbe": {
                                **health_probe,
                                "initialDelaySeconds": 15,
                                "periodSeconds": 20,
                            },
                        }
                    ],
                    "volumes": [
                        {"name": "registry-config", "configMap": {"name": "registry-config"}}
                    ],
                },
            },
        }
