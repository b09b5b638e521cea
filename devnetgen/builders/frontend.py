"""
Frontend builder: one headless Service and one Deployment per frontend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.base import ComponentBuilder
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import FrontendSpec, NetworkSpec

DEFAULT_FRONTEND_RESOURCES = {"cpu": "0.2", "memory": "200M"}


class FrontendBuilder(ComponentBuilder):
    def build(self, spec: FrontendSpec, network: NetworkSpec) -> list[Manifest]:
        frontend_labels = helpers.component_labels(network, "frontend", name=spec.name)
        return [
            Manifest.service(spec.name, frontend_labels, self.service_spec(spec)),
            Manifest.deployment(spec.name, frontend_labels, self.deployment_spec(spec, network)),
        ]

    def http_port(self, spec: FrontendSpec) -> int | None:
        return spec.ports.rest if spec.ports else None

    def service_spec(self, spec: FrontendSpec) -> dict[str, Any]:
        port = self.http_port(spec)
        return {
            "clusterIP": "None",
            "ports": (
                [{"name": "http", "port": port, "protocol": "TCP", "targetPort": "http"}]
                if port
                else []
            ),
            "selector": {labels.NAME: spec.name},
        }

    def deployment_spec(self, spec: FrontendSpec, network: NetworkSpec) -> dict[str, Any]:
        port = self.http_port(spec)
        return {
            "replicas": spec.replicas or 1,
            "revisionHistoryLimit": 3,
            "selector": {"matchLabels": {labels.INSTANCE: spec.name, labels.NAME: spec.name}},
            "template": {
                "metadata": {
                    "annotations": {
                        "quality": "release",
                        "role": "frontend",
                        "sla": "high",
                        "tier": "frontend",
                    },
                    "labels": {
                        labels.INSTANCE: spec.name,
                        labels.TYPE: spec.type,
                        labels.NAME: spec.name,
                        labels.RAWNAME: spec.name,
                        labels.VERSION: self.context.generator_version,
                    },
                },
                "spec": {
                    "containers": [
                        {
                            "name": spec.name,
                            "image": spec.image,
                            "imagePullPolicy": network.image_pull_policy,
                            "ports": (
                                [{"name": "http", "containerPort": port, "protocol": "TCP"}]
                                if port
                                else []
                            ),
                            "env": [helpers.env(key, value) for key, value in (spec.env or {}).items()],
                            "resources": helpers.resource_object(
                                spec.resources or DEFAULT_FRONTEND_RESOURCES
                            ),
                        }
                    ]
                },
            },
        }
