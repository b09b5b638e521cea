"""
Manifest value object.

A Manifest is one Kubernetes resource document. Builders create them,
the aggregator concatenates them, and the writer groups and serializes
them. Nothing mutates a manifest after it is created.

The label vocabulary below is the only thing the output path resolver
looks at, so builders must label consistently.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

# =============================================================================
# Label vocabulary
# =============================================================================

COMPONENT = "app.kubernetes.io/component"
ROLE = "app.kubernetes.io/role"
PART_OF = "app.kubernetes.io/part-of"
NAME = "app.kubernetes.io/name"
INSTANCE = "app.kubernetes.io/instance"
VERSION = "app.kubernetes.io/version"
MANAGED_BY = "app.kubernetes.io/managed-by"
TYPE = "app.kubernetes.io/type"
RAWNAME = "app.kubernetes.io/rawname"
CHAIN_NAME = "starship.io/chain-name"
CHAIN_ID = "starship.io/chain-id"

MANIFEST_KINDS = ("ConfigMap", "Service", "StatefulSet", "Deployment", "Ingress", "Issuer")


@dataclass(frozen=True)
class Manifest:
    """
    One Kubernetes resource.

    Attributes:
        api_version: e.g. "v1", "apps/v1", "cert-manager.io/v1"
        kind: One of MANIFEST_KINDS
        name: metadata.name
        labels: metadata.labels
        body: Kind-specific payload ({"data": ...} or {"spec": ...})
        annotations: Optional metadata.annotations
    """

    api_version: str
    kind: str
    name: str
    labels: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)
    annotations: dict[str, str] | None = None

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def config_map(cls, name: str, labels: dict[str, str], data: dict[str, str]) -> Manifest:
        return cls("v1", "ConfigMap", name, labels, {"data": data})

    @classmethod
    def service(cls, name: str, labels: dict[str, str], spec: dict[str, Any]) -> Manifest:
        return cls("v1", "Service", name, labels, {"spec": spec})

    @classmethod
    def stateful_set(cls, name: str, labels: dict[str, str], spec: dict[str, Any]) -> Manifest:
        return cls("apps/v1", "StatefulSet", name, labels, {"spec": spec})

    @classmethod
    def deployment(cls, name: str, labels: dict[str, str], spec: dict[str, Any]) -> Manifest:
        return cls("apps/v1", "Deployment", name, labels, {"spec": spec})

    # -------------------------------------------------------------------------
    # Label accessors
    # -------------------------------------------------------------------------

    @property
    def component(self) -> str | None:
        return self.labels.get(COMPONENT)

    @property
    def role(self) -> str | None:
        return self.labels.get(ROLE)

    @property
    def part_of(self) -> str | None:
        return self.labels.get(PART_OF)

    @property
    def chain_name(self) -> str | None:
        return self.labels.get(CHAIN_NAME)

    @property
    def spec(self) -> dict[str, Any]:
        return self.body.get("spec", {})

    @property
    def data(self) -> dict[str, str]:
        return self.body.get("data", {})

    def to_dict(self) -> dict[str, Any]:
        """Render as a plain Kubernetes document (a deep copy)."""
        metadata: dict[str, Any] = {"name": self.name, "labels": dict(self.labels)}
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        document: dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata,
        }
        document.update(copy.deepcopy(self.body))
        return document
