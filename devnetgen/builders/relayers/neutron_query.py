"""
Neutron interchain-query relayer.

Manifests (in order):
    ConfigMap    neutron-query-relayer-<name>  config.json
    Service      neutron-query-relayer-<name>  metrics port
    StatefulSet  neutron-query-relayer-<name>

The relayer links a neutron chain with one target chain. The neutron side
is the first linked chain whose family name is "neutron" (else the first
chain); the target is the first other chain.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.relayers.base import (
    BaseRelayerBuilder,
    RelayerManifestGenerator,
    RelayerStatefulSetGenerator,
)
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import ResolvedChain

NEUTRON_QUERY_RELAYER_IMAGE = "ghcr.io/cosmology-tech/starship/neutron-query-relayer:v0.2.0"
DEFAULT_METRICS_PORT = 9090


def metrics_port(config: dict[str, Any]) -> int:
    return config.get("metrics_port") or DEFAULT_METRICS_PORT


class NeutronQueryConfigMapGenerator(RelayerManifestGenerator):
    def generate(self) -> list[Manifest]:
        return [
            Manifest.config_map(self.fullname, self.labels, {"config.json": self.relayer_config()})
        ]

    def chain_pair(self) -> tuple[ResolvedChain, ResolvedChain]:
        """(neutron chain, target chain) among the linked chains."""
        chains = self.chains()
        neutron = next((chain for chain in chains if chain.name == "neutron"), chains[0])
        target = next((chain for chain in chains if chain.id != neutron.id), chains[1])
        return neutron, target

    def chain_block(self, chain: ResolvedChain, prefix: str) -> dict[str, Any]:
        config = self.relayer.config
        return {
            "chain_id": chain.id,
            "rpc_addr": helpers.chain_address(chain.hostname, "rpc"),
            "grpc_addr": helpers.chain_address(chain.hostname, "grpc"),
            "websocket_addr": helpers.chain_address(chain.hostname, "rpc", scheme="ws") + "/websocket",
            "account_prefix": chain.prefix,
            "keyring_backend": "test",
            "gas_prices": f"{config.get(f'{prefix}_gas_prices') or '0.025'}{chain.denom}",
            "gas_adjustment": config.get(f"{prefix}_gas_adjustment") or 1.5,
            "connection_id": config.get(f"{prefix}_connection_id") or "connection-0",
            "debug": bool(config.get("debug")),
            "timeout": config.get("timeout") or "10s",
            "tx_memo": config.get("tx_memo") or "neutron-query-relayer",
        }

    def relayer_config(self) -> str:
        config = self.relayer.config
        neutron, target = self.chain_pair()
        document = {
            "relayer": {
                "neutron_chain": self.chain_block(neutron, "neutron"),
                "target_chain": self.chain_block(target, "target"),
                "queries_file": config.get("queries_file") or "/configs/queries.json",
                "check_submitted_tx": config.get("check_submitted_tx") is not False,
                "storage_path": config.get("storage_path") or "./storage",
                "log_level": config.get("log_level") or "info",
            }
        }
        return json.dumps(document, indent=2)


class NeutronQueryServiceGenerator(RelayerManifestGenerator):
    def generate(self) -> list[Manifest]:
        port = metrics_port(self.relayer.config)
        return [
            Manifest.service(
                self.fullname,
                self.labels,
                {
                    "clusterIP": "None",
                    "ports": [{"name": "metrics", "port": port, "protocol": "TCP", "targetPort": port}],
                    "selector": {labels.NAME: self.fullname},
                },
            )
        ]


class NeutronQueryStatefulSetGenerator(RelayerStatefulSetGenerator):
    def extra_env(self) -> list[dict[str, Any]]:
        config = self.relayer.config
        return [
            helpers.env("CONFIG_PATH", "/configs/config.json"),
            helpers.env("STORAGE_PATH", config.get("storage_path") or "./storage"),
            helpers.env("LOG_LEVEL", config.get("log_level") or "info"),
            helpers.env("METRICS_PORT", metrics_port(config)),
        ]

    def start_script(self) -> str:
        return (
            'RLY_INDEX=${HOSTNAME##*-}\necho "Relayer Index: $RLY_INDEX"\n'
            "neutron-query-relayer start --config /configs/config.json"
        )

    def init_script(self) -> str:
        lines = [
            "set -ux",
            "",
            "RLY_INDEX=${HOSTNAME##*-}",
            'echo "Relayer Index: $RLY_INDEX"',
            "",
            "mkdir -p $STORAGE_PATH",
            'MNEMONIC=$(jq -r ".relayers[$RLY_INDEX].mnemonic" $KEYS_CONFIG)',
        ]
        # The relayer derives its addresses from the mnemonic itself
        for chain in self.chains():
            lines.extend(["", f'echo "Chain {chain.id} ({chain.denom}) setup completed"'])
        return "\n".join(lines) + "\n"


class NeutronQueryRelayerBuilder(BaseRelayerBuilder):
    default_image = NEUTRON_QUERY_RELAYER_IMAGE
    needs_service = True
    config_map_generator = NeutronQueryConfigMapGenerator
    service_generator = NeutronQueryServiceGenerator
    statefulset_generator = NeutronQueryStatefulSetGenerator
