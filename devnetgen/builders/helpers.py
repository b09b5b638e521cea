"""
Shared helpers for manifest bodies.

Labels, env var blocks, resource objects, volumes and the other small
fragments that every chain and relayer builder repeats.
"""

from __future__ import annotations

from typing import Any

from devnetgen.schemas import manifest as labels
from devnetgen.schemas.network import NetworkSpec, Resources, ResolvedChain

DEFAULT_CHART_VERSION = "1.8.0"
MANAGED_BY = "devnetgen"

EXPOSER_IMAGE = "ghcr.io/cosmology-tech/starship/exposer:latest"
WAIT_FOR_SERVICE_IMAGE = "ghcr.io/cosmology-tech/starship/wait-for-service:v0.1.0"
DEFAULT_EXPOSER_PORT = 8081
EXPOSER_GRPC_PORT = 9099
METRICS_PORT = 26660

PORT_MAP: dict[str, int] = {
    "rest": 1317,
    "rpc": 26657,
    "grpc": 9090,
    "grpc-web": 9091,
    "p2p": 26656,
    "exposer": DEFAULT_EXPOSER_PORT,
    "faucet": 8000,
}

DEFAULT_NODE_RESOURCES = {"cpu": "0.5", "memory": "500M"}
DEFAULT_WAIT_RESOURCES = {"cpu": "0.1", "memory": "128M"}

POD_ANNOTATIONS = {
    "quality": "release",
    "role": "api-gateway",
    "sla": "high",
    "tier": "gateway",
}

KEYS_CONFIG = "/configs/keys.json"


# =============================================================================
# Labels
# =============================================================================


def fullname(network: NetworkSpec) -> str:
    return network.name[:63].rstrip("-")


def common_labels(network: NetworkSpec) -> dict[str, str]:
    """Labels carried by every manifest of a network."""
    return {
        labels.NAME: fullname(network),
        labels.INSTANCE: network.name,
        labels.VERSION: network.version or DEFAULT_CHART_VERSION,
        labels.MANAGED_BY: MANAGED_BY,
    }


def chain_labels(
    chain: ResolvedChain,
    network: NetworkSpec,
    role: str,
    name: str | None = None,
) -> dict[str, str]:
    """Labels for a manifest belonging to one chain."""
    return {
        **common_labels(network),
        labels.COMPONENT: "chain",
        labels.NAME: name or chain.name,
        labels.PART_OF: chain.id,
        labels.ROLE: role,
        labels.CHAIN_NAME: chain.name,
        labels.CHAIN_ID: chain.id,
    }


def component_labels(
    network: NetworkSpec,
    component: str,
    *,
    name: str | None = None,
    role: str | None = None,
    part_of: str = "starship",
) -> dict[str, str]:
    """Labels for a non-chain manifest (relayer, registry, explorer, ...)."""
    result = {**common_labels(network), labels.COMPONENT: component, labels.PART_OF: part_of}
    if role:
        result[labels.ROLE] = role
    if name:
        result[labels.NAME] = name
    return result


# =============================================================================
# Resources
# =============================================================================


def resource_object(resources: Resources | dict[str, Any] | None) -> dict[str, Any]:
    """
    Expand resources into a Kubernetes resources block.

    The short form {cpu, memory} becomes identical limits and requests;
    the full form is passed through.
    """
    if resources is None:
        return {}
    if isinstance(resources, Resources):
        resources = resources.model_dump(exclude_none=True)
    if resources.get("cpu") is not None and resources.get("memory") is not None:
        pair = {"cpu": resources["cpu"], "memory": resources["memory"]}
        return {"limits": dict(pair), "requests": dict(pair)}
    return {key: value for key, value in resources.items() if key in ("limits", "requests")}


def node_resources(chain: ResolvedChain, network: NetworkSpec) -> dict[str, Any]:
    if chain.resources is not None:
        return resource_object(chain.resources)
    if network.resources and network.resources.node:
        return resource_object(network.resources.node)
    return resource_object(DEFAULT_NODE_RESOURCES)


def wait_resources(network: NetworkSpec) -> dict[str, Any]:
    if network.resources and network.resources.wait:
        return resource_object(network.resources.wait)
    return resource_object(DEFAULT_WAIT_RESOURCES)


# =============================================================================
# Ports
# =============================================================================


def chain_ports(chain: ResolvedChain) -> dict[str, int]:
    """The chain's named ports: the fixed port map with per-chain overrides."""
    ports = dict(PORT_MAP)
    if chain.ports is not None:
        for key, value in chain.ports.model_dump(by_alias=True, exclude_none=True).items():
            if key in ports:
                ports[key] = value
    return ports


def exposer_port(network: NetworkSpec, chain: ResolvedChain | None = None) -> int:
    """
    Port the exposer sidecar listens on.

    Network-level exposer.ports.rest wins, then the chain's own exposer
    port, then the default. Never missing.
    """
    if network.exposer and network.exposer.ports and network.exposer.ports.rest:
        return network.exposer.ports.rest
    if chain is not None and chain.ports is not None and chain.ports.exposer:
        return chain.ports.exposer
    return DEFAULT_EXPOSER_PORT


def service_ports(ports: dict[str, int]) -> list[dict[str, Any]]:
    return [
        {"name": name, "port": port, "protocol": "TCP", "targetPort": str(port)}
        for name, port in ports.items()
    ]


# =============================================================================
# Environment
# =============================================================================


def env(name: str, value: Any) -> dict[str, Any]:
    if isinstance(value, bool):
        value = str(value).lower()
    return {"name": name, "value": "" if value is None else str(value)}


def namespace_env() -> dict[str, Any]:
    return {"name": "NAMESPACE", "valueFrom": {"fieldRef": {"fieldPath": "metadata.namespace"}}}


def default_env_vars(chain: ResolvedChain) -> list[dict[str, Any]]:
    return [
        env("DENOM", chain.denom),
        env("COINS", chain.coins),
        env("CHAIN_BIN", chain.binary),
        env("CHAIN_DIR", chain.home),
        env("CODE_REPO", chain.repo),
        env("DAEMON_HOME", chain.home),
        env("DAEMON_NAME", chain.binary),
    ]


def chain_env_vars(chain: ResolvedChain) -> list[dict[str, Any]]:
    return [env("CHAIN_ID", chain.id)]


def timeout_env_vars(network: NetworkSpec) -> list[dict[str, Any]]:
    if network.timeouts is None:
        return []
    timeouts = network.timeouts.model_dump(exclude_none=True)
    return [env(key.upper(), value) for key, value in timeouts.items()]


def genesis_env_vars(chain: ResolvedChain, port: int) -> list[dict[str, Any]]:
    return [
        env("GENESIS_HOST", f"{chain.hostname}-genesis"),
        env("GENESIS_PORT", port),
        namespace_env(),
    ]


# =============================================================================
# Addresses
# =============================================================================


def genesis_host(hostname: str) -> str:
    """In-cluster DNS name of a chain's genesis node."""
    return f"{hostname}-genesis.$(NAMESPACE).svc.cluster.local"


def chain_address(hostname: str, port_name: str, scheme: str = "http") -> str:
    return f"{scheme}://{genesis_host(hostname)}:{PORT_MAP[port_name]}"


# =============================================================================
# Containers and volumes
# =============================================================================


def wait_init_container(hostname: str, port: int, network: NetworkSpec) -> dict[str, Any]:
    """Init container that blocks until a chain's genesis node answers."""
    return {
        "name": f"init-{hostname}",
        "image": WAIT_FOR_SERVICE_IMAGE,
        "imagePullPolicy": network.image_pull_policy,
        "command": ["bash", "-c"],
        "args": [
            f'echo "Waiting for {hostname} service..."\n'
            f"wait-for-service {hostname}-genesis.$(NAMESPACE).svc.cluster.local:{port}"
        ],
        "env": [namespace_env()],
        "resources": wait_resources(network),
    }


def chain_volume_mounts(chain: ResolvedChain) -> list[dict[str, str]]:
    return [
        {"mountPath": chain.home or "/root", "name": "node"},
        {"mountPath": "/configs", "name": "addresses"},
        {"mountPath": "/scripts", "name": "scripts"},
    ]


def chain_volumes(chain: ResolvedChain) -> list[dict[str, Any]]:
    volumes: list[dict[str, Any]] = [
        {"name": "node", "emptyDir": {}},
        {"name": "addresses", "configMap": {"name": "keys"}},
        {"name": "scripts", "configMap": {"name": f"setup-scripts-{chain.hostname}"}},
    ]
    if chain.faucet_enabled and chain.faucet.type == "starship":
        volumes.append({"name": "faucet", "emptyDir": {}})
    if chain.genesis:
        volumes.append({"name": "patch", "configMap": {"name": f"patch-{chain.hostname}"}})
    return volumes


def pod_annotations() -> dict[str, str]:
    return dict(POD_ANNOTATIONS)


def chain_addresses(chains: list[ResolvedChain], port_name: str, scheme: str = "http") -> str:
    """Comma-separated in-cluster addresses of one port across chains."""
    return ",".join(chain_address(chain.hostname, port_name, scheme) for chain in chains)


def exposer_addresses(chains: list[ResolvedChain], network: NetworkSpec) -> str:
    return ",".join(
        f"http://{genesis_host(chain.hostname)}:{exposer_port(network, chain)}" for chain in chains
    )
