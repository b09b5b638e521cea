"""
Ingress builder.

When ingress is enabled, emits a cert-manager Issuer followed by one
Ingress named `<type>-ingress` routing public hosts to the explorer,
registry, chain endpoints, hermes relayers and frontends.

Hosts are built from the configured base host (default thestarship.io)
with any leading wildcard removed:

    explorer.<host>                  -> explorer:http
    registry.<host>                  -> registry:http
    rest.<chain-id>-genesis.<host>   -> <chain-id>-genesis:rest (+ /faucet, /exposer)
    rpc.<chain-id>-genesis.<host>    -> <chain-id>-genesis:rpc
    rest.hermes-<name>.<host>        -> hermes-<name>:rest (+ /exposer)
    <frontend>.<host>                -> <frontend>:http
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.base import ComponentBuilder
from devnetgen.runtime.resolver import chain_hostname
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import IngressSpec, NetworkSpec

DEFAULT_INGRESS_HOST = "thestarship.io"
DEFAULT_ISSUER = "cert-issuer"
ACME_SERVER = "https://acme-v02.api.letsencrypt.org/directory"
ACME_EMAIL = "devops@cosmoslogy.zone"


def base_host(spec: IngressSpec) -> str:
    return (spec.host or "").replace("*.", "") or DEFAULT_INGRESS_HOST


def issuer_name(spec: IngressSpec) -> str:
    if spec.cert_manager and spec.cert_manager.issuer:
        return spec.cert_manager.issuer
    return DEFAULT_ISSUER


def _path(path: str, service: str, port: str) -> dict[str, Any]:
    return {
        "pathType": "ImplementationSpecific",
        "path": path,
        "backend": {"service": {"name": service, "port": {"name": port}}},
    }


def _rule(host: str, *paths: dict[str, Any]) -> dict[str, Any]:
    return {"host": host, "http": {"paths": list(paths)}}


class IngressBuilder(ComponentBuilder):
    def build(self, spec: IngressSpec, network: NetworkSpec) -> list[Manifest]:
        if not spec.enabled:
            return []
        ingress_labels = helpers.component_labels(network, "ingress")
        return [
            self.issuer(spec, ingress_labels),
            self.ingress(spec, network, ingress_labels),
        ]

    def issuer(self, spec: IngressSpec, ingress_labels: dict[str, str]) -> Manifest:
        name = issuer_name(spec)
        return Manifest(
            "cert-manager.io/v1",
            "Issuer",
            name,
            ingress_labels,
            {
                "spec": {
                    "acme": {
                        "server": ACME_SERVER,
                        "email": ACME_EMAIL,
                        "privateKeySecretRef": {"name": name},
                        "solvers": [{"http01": {"ingress": {"class": spec.type}}}],
                    }
                }
            },
        )

    def ingress(
        self, spec: IngressSpec, network: NetworkSpec, ingress_labels: dict[str, str]
    ) -> Manifest:
        host = base_host(spec)
        return Manifest(
            "networking.k8s.io/v1",
            "Ingress",
            f"{spec.type}-ingress",
            ingress_labels,
            {
                "spec": {
                    "ingressClassName": spec.type,
                    "tls": self.tls(network, host, spec.type),
                    "rules": self.rules(network, host),
                }
            },
            annotations={
                "nginx.ingress.kubernetes.io/rewrite-target": "/$1",
                "nginx.ingress.kubernetes.io/use-regex": "true",
                "cert-manager.io/issuer": issuer_name(spec),
            },
        )

    def public_hosts(self, network: NetworkSpec, host: str) -> list[str]:
        hosts = []
        if network.explorer_enabled:
            hosts.append(f"explorer.{host}")
        if network.registry_enabled:
            hosts.append(f"registry.{host}")
        for chain in network.chains:
            hosts.append(f"rest.{chain.id}-genesis.{host}")
            hosts.append(f"rpc.{chain.id}-genesis.{host}")
        for frontend in network.frontends:
            hosts.append(f"{frontend.name}.{host}")
        return hosts

    def tls(self, network: NetworkSpec, host: str, ingress_type: str) -> list[dict[str, Any]]:
        suffix = f".{host}"
        return [
            {
                "hosts": [public_host],
                "secretName": f"{public_host.removesuffix(suffix)}.{ingress_type}-ingress-tls",
            }
            for public_host in self.public_hosts(network, host)
        ]

    def rules(self, network: NetworkSpec, host: str) -> list[dict[str, Any]]:
        rules = []
        if network.explorer_enabled:
            rules.append(_rule(f"explorer.{host}", _path("/(.*)", "explorer", "http")))
        if network.registry_enabled:
            rules.append(_rule(f"registry.{host}", _path("/(.*)", "registry", "http")))

        for chain in network.chains:
            service = f"{chain_hostname(chain.id)}-genesis"
            rules.append(
                _rule(
                    f"rest.{chain.id}-genesis.{host}",
                    _path("/(.*)", service, "rest"),
                    _path("/faucet/(.*)", service, "faucet"),
                    _path("/exposer/(.*)", service, "exposer"),
                )
            )
            rules.append(_rule(f"rpc.{chain.id}-genesis.{host}", _path("/(.*)", service, "rpc")))

        # Only hermes exposes a REST API worth routing
        for relayer in network.relayers:
            if relayer.type == "hermes":
                rules.append(
                    _rule(
                        f"rest.{relayer.fullname}.{host}",
                        _path("/(.*)", relayer.fullname, "rest"),
                        _path("/exposer/(.*)", relayer.fullname, "exposer"),
                    )
                )

        for frontend in network.frontends:
            rules.append(_rule(f"{frontend.name}.{host}", _path("/(.*)", frontend.name, "http")))
        return rules
