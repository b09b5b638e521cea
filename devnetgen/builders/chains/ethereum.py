"""
Ethereum chain builder.

A single-node proof-of-stake devnet: geth as the execution client, a prysm
beacon chain and a prysm validator, all in one pod. Genesis for both layers
is generated by init containers from the config-ethereum ConfigMap.

Manifests per chain (in order):
    Service      <name>-<id>  (http 8545, ws 8546, rpc 8551)
    StatefulSet  <name>-<id>
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.base import ChainBuilder, run_generators
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain

ETHEREUM_PORTS = {"http": 8545, "ws": 8546, "rpc": 8551}

PRYSMCTL_IMAGE = "ghcr.io/hyperweb-io/starship/prysm/cmd/prysmctl:v5.2.0"
BEACON_IMAGE = "ghcr.io/hyperweb-io/starship/prysm/beacon-chain:v5.2.0"
VALIDATOR_IMAGE = "ghcr.io/hyperweb-io/starship/prysm/validator:v5.2.0"

FEE_RECIPIENT = "0x123463a4B065722E99115D6c222f267d9cABb524"
VALIDATOR_FEE_RECIPIENT = "0x0C46c2cAFE097b4f7e1BB868B89e5697eE65f934"

SHARED_MOUNTS = [
    {"name": "ethereum", "mountPath": "/ethereum"},
    {"name": "secrets", "mountPath": "/etc/secrets"},
]


def ethereum_name(chain: ResolvedChain) -> str:
    return f"{chain.name}-{chain.id}"


def _config_value(chain: ResolvedChain, section: str, key: str, default: Any) -> Any:
    """Read chain.config[section][key], e.g. config.beacon.image."""
    value = ((chain.config or {}).get(section) or {}).get(key)
    return default if value is None else value


class EthereumServiceGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec):
        self.chain = chain
        self.network = network

    def generate(self) -> list[Manifest]:
        name = ethereum_name(self.chain)
        return [
            Manifest.service(
                name,
                helpers.chain_labels(self.chain, self.network, "service", name=name),
                {
                    "clusterIP": "None",
                    "ports": [
                        {"name": port_name, "port": port, "protocol": "TCP", "targetPort": str(port)}
                        for port_name, port in ETHEREUM_PORTS.items()
                    ],
                    "selector": {labels.NAME: name},
                },
            )
        ]


class EthereumStatefulSetGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec):
        self.chain = chain
        self.network = network

    @property
    def num_validators(self) -> int:
        return _config_value(self.chain, "validator", "numValidator", 1)

    def generate(self) -> list[Manifest]:
        chain = self.chain
        name = ethereum_name(chain)
        spec = {
            "serviceName": name,
            "replicas": 1,
            "selector": {"matchLabels": {labels.INSTANCE: name, labels.NAME: name}},
            "template": {
                "metadata": {
                    "annotations": helpers.pod_annotations(),
                    "labels": {
                        labels.INSTANCE: name,
                        labels.TYPE: name,
                        labels.NAME: name,
                        labels.RAWNAME: chain.id,
                    },
                },
                "spec": {
                    "initContainers": [
                        self.genesis_beacon_init_container(),
                        self.genesis_execution_init_container(),
                    ],
                    "containers": [
                        self.geth_container(),
                        self.beacon_container(),
                        self.validator_container(),
                    ],
                    "volumes": [
                        {"name": "config", "configMap": {"name": "config-ethereum"}},
                        {"name": "ethereum", "emptyDir": {}},
                        {"name": "secrets", "emptyDir": {}},
                    ],
                },
            },
        }
        return [
            Manifest.stateful_set(
                name, helpers.chain_labels(chain, self.network, "ethereum", name=name), spec
            )
        ]

    def genesis_beacon_init_container(self) -> dict[str, Any]:
        script = "\n".join(
            [
                "mkdir -p /ethereum/consensus /ethereum/execution",
                "cp /config/genesis.json /ethereum/execution/genesis.json",
                "cp /config/config.yaml /ethereum/consensus/config.yaml",
                "",
                'echo "Initializing genesis"',
                "prysmctl testnet generate-genesis \\",
                "  --fork=capella \\",
                f"  --num-validators={self.num_validators} \\",
                "  --genesis-time-delay=15 \\",
                "  --output-ssz=/ethereum/consensus/genesis.ssz \\",
                "  --chain-config-file=/ethereum/consensus/config.yaml \\",
                "  --geth-genesis-json-in=/ethereum/execution/genesis.json \\",
                "  --geth-genesis-json-out=/ethereum/execution/genesis.json",
                "",
                'echo "Copy secrets over"',
                "cp /config/jwt.hex /etc/secrets/jwt.hex",
            ]
        )
        return {
            "name": "init-genesis-beacon",
            "image": _config_value(self.chain, "prysmctl", "image", PRYSMCTL_IMAGE),
            "imagePullPolicy": "IfNotPresent",
            "command": ["bash", "-c"],
            "args": [script],
            "resources": helpers.node_resources(self.chain, self.network),
            "volumeMounts": [
                {"name": "secrets", "mountPath": "/etc/secrets"},
                {"name": "config", "mountPath": "/config"},
                {"name": "ethereum", "mountPath": "/ethereum"},
            ],
        }

    def genesis_execution_init_container(self) -> dict[str, Any]:
        return {
            "name": "init-genesis-execution",
            "image": self.chain.image,
            "imagePullPolicy": "IfNotPresent",
            "command": ["bash", "-c"],
            "args": [
                'echo "Initializing genesis geth"\n'
                "geth --datadir /ethereum/execution init /ethereum/execution/genesis.json"
            ],
            "resources": helpers.node_resources(self.chain, self.network),
            "volumeMounts": [
                {"name": "secrets", "mountPath": "/etc/secrets"},
                {"name": "config", "mountPath": "/config"},
                {"name": "ethereum", "mountPath": "/ethereum"},
            ],
        }

    def geth_container(self) -> dict[str, Any]:
        chain = self.chain
        flags = [
            "--http",
            "--http.addr=0.0.0.0",
            "--http.port=$HTTP_PORT",
            "--http.api=eth,net,web3,debug",
            "--ws --ws.addr=0.0.0.0",
            "--ws.port=$WS_PORT",
            "--authrpc.addr=0.0.0.0",
            "--authrpc.port=$RPC_PORT",
            "--nodiscover",
            "--http.corsdomain=*",
            "--ws.api=eth,net,web3",
            "--ws.origins=*",
            "--http.vhosts=*",
            "--authrpc.vhosts=*",
            "--authrpc.jwtsecret=/etc/secrets/jwt.hex",
            f"--unlock={FEE_RECIPIENT}",
            "--password=/dev/null",
            "--syncmode=snap",
            "--snapshot=false",
            f"--networkid={chain.id}",
            "--verbosity=4",
            "--maxpeers=50",
            "--nat=none",
            "--log.vmodule=engine=6",
        ]
        script = "\n".join(
            [
                'echo "Setting UDP buffer size"',
                "sysctl -w net.core.rmem_max=16777216",
                "sysctl -w net.core.wmem_max=16777216",
                "",
                'echo "Starting execution chain"',
                "geth --datadir /ethereum/execution " + " \\\n  ".join(flags),
            ]
        )
        syncing = (
            "curl -s --data '{\"jsonrpc\":\"2.0\",\"method\":\"eth_syncing\",\"params\":[],\"id\":1}' "
            '-H "Content-Type: application/json" -X POST '
            f"http://localhost:{ETHEREUM_PORTS['http']} | grep -q '\"result\":false'"
        )
        return {
            "name": "geth",
            "image": chain.image,
            "imagePullPolicy": "IfNotPresent",
            "env": [
                helpers.env("HTTP_PORT", ETHEREUM_PORTS["http"]),
                helpers.env("WS_PORT", ETHEREUM_PORTS["ws"]),
                helpers.env("RPC_PORT", ETHEREUM_PORTS["rpc"]),
            ],
            "command": ["bash", "-c"],
            "args": [script],
            "resources": helpers.node_resources(chain, self.network),
            "volumeMounts": [dict(mount) for mount in SHARED_MOUNTS],
            "readinessProbe": {
                "exec": {"command": ["/bin/bash", "-c", syncing]},
                "initialDelaySeconds": 15,
                "periodSeconds": 10,
            },
        }

    def beacon_container(self) -> dict[str, Any]:
        chain = self.chain
        flags = [
            f"--execution-endpoint=http://0.0.0.0:{ETHEREUM_PORTS['rpc']}",
            "--jwt-secret=/etc/secrets/jwt.hex",
            "--accept-terms-of-use",
            "--http-host 0.0.0.0",
            "--rpc-host 0.0.0.0",
            f"--chain-id {chain.id}",
            "--contract-deployment-block=0",
            "--datadir /ethereum/consensus",
            "--genesis-state /ethereum/consensus/genesis.ssz",
            "--min-sync-peers=0",
            "--chain-config-file=/ethereum/consensus/config.yaml",
            f"--network-id {chain.id}",
            f"--suggested-fee-recipient={FEE_RECIPIENT}",
            "--minimum-peers-per-subnet=0",
            "--force-clear-db",
        ]
        script = "\n".join(
            [
                'echo "Waiting 30 seconds for execution client to be ready..."',
                "sleep 30",
                "",
                'echo "Starting consensus chain"',
                "beacon-chain \\\n  " + " \\\n  ".join(flags),
            ]
        )
        return {
            "name": "beacon-chain",
            "image": _config_value(chain, "beacon", "image", BEACON_IMAGE),
            "imagePullPolicy": "Always",
            "env": [helpers.namespace_env()],
            "command": ["bash", "-c"],
            "args": [script],
            "resources": helpers.node_resources(chain, self.network),
            "volumeMounts": [dict(mount) for mount in SHARED_MOUNTS],
            "readinessProbe": {
                "httpGet": {"path": "/eth/v1/node/health", "port": "3500"},
                "initialDelaySeconds": 15,
                "periodSeconds": 20,
            },
        }

    def validator_container(self) -> dict[str, Any]:
        flags = [
            "--accept-terms-of-use",
            "--beacon-rpc-provider=0.0.0.0:4000",
            "--datadir=/ethereum/consensus/validator",
            f"--interop-num-validators={self.num_validators}",
            "--interop-start-index=0",
            "--force-clear-db",
            "--grpc-gateway-host=0.0.0.0",
            "--chain-config-file=/ethereum/consensus/config.yaml",
            "--monitoring-host=0.0.0.0",
            "--monitoring-port=8081",
            f"--suggested-fee-recipient={VALIDATOR_FEE_RECIPIENT}",
        ]
        script = "\n".join(
            [
                'echo "Waiting 20 seconds for execution client to be ready..."',
                "sleep 20",
                "mkdir -p /ethereum/consensus/validator",
                'echo "Starting validator node"',
                "validator \\\n  " + " \\\n  ".join(flags),
            ]
        )
        return {
            "name": "validator",
            "image": _config_value(self.chain, "validator", "image", VALIDATOR_IMAGE),
            "imagePullPolicy": "Always",
            "env": [helpers.namespace_env()],
            "command": ["bash", "-c"],
            "args": [script],
            "resources": helpers.node_resources(self.chain, self.network),
            "volumeMounts": [dict(mount) for mount in SHARED_MOUNTS],
            "readinessProbe": {
                "httpGet": {"path": "/metrics", "port": "8081"},
                "initialDelaySeconds": 20,
                "periodSeconds": 30,
            },
        }


class EthereumChainBuilder(ChainBuilder):
    def build(self, chain: ResolvedChain, network: NetworkSpec) -> list[Manifest]:
        return run_generators(
            [
                EthereumServiceGenerator(chain, network),
                EthereumStatefulSetGenerator(chain, network),
            ]
        )
