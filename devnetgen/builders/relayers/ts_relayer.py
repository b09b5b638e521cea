"""
TypeScript relayer (ts-relayer / ibc-setup).

Manifests (in order):
    ConfigMap    ts-relayer-<name>  app.yaml and registry.yaml
    StatefulSet  ts-relayer-<name>
"""

from __future__ import annotations

from typing import Any

import yaml

from devnetgen.builders import helpers
from devnetgen.builders.relayers.base import (
    DEFAULT_HD_PATH,
    BaseRelayerBuilder,
    RelayerManifestGenerator,
    RelayerStatefulSetGenerator,
)
from devnetgen.schemas.manifest import Manifest

TS_RELAYER_IMAGE = "ghcr.io/cosmology-tech/starship/ts-relayer:0.9.0"


def _dump(header: str, document: dict[str, Any]) -> str:
    return f"# {header}\n" + yaml.safe_dump(document, sort_keys=False)


class TsRelayerConfigMapGenerator(RelayerManifestGenerator):
    def generate(self) -> list[Manifest]:
        return [
            Manifest.config_map(
                self.fullname,
                self.labels,
                {
                    "app.yaml": self.app_config(),
                    "registry.yaml": self.registry_config(),
                },
            )
        ]

    def app_config(self) -> str:
        global_settings = self.settings("global")
        chains: dict[str, Any] = {}
        for chain_id in self.relayer.chains:
            chain = self.chain(chain_id)
            overrides = self.chain_settings(chain_id)
            chains[chain_id] = {
                "chain_id": chain_id,
                "rpc": [helpers.chain_address(chain.hostname, "rpc")],
                "rest": [helpers.chain_address(chain.hostname, "rest")],
                "chain_name": chain.name,
                "pretty_name": overrides.get("pretty_name") or chain.name,
                "prefix": chain.prefix,
                "denom": chain.denom,
                "decimals": overrides.get("decimals") or 6,
                "gas_price": overrides.get("gas_price") or "0.01",
                "hd_path": chain.hd_path or DEFAULT_HD_PATH,
            }

        connections = [
            {
                "src": {
                    "chain_id": channel.a_chain,
                    "connection_id": channel.a_connection or "",
                    "channel_id": "",
                    "port_id": channel.a_port,
                },
                "dst": {
                    "chain_id": channel.b_chain or "",
                    "connection_id": "",
                    "channel_id": "",
                    "port_id": channel.b_port,
                },
                "new_connection": bool(channel.new_connection),
                "order": channel.order or "unordered",
            }
            for channel in self.relayer.channels or []
        ]

        document = {
            "global": {"api_port": 3000, "timeout": 10000, "memo": "", **global_settings},
            "chains": chains,
            "cl": connections,
        }
        return _dump("TS Relayer Configuration", document)

    def registry_config(self) -> str:
        entries = []
        for chain_id in self.relayer.chains:
            chain = self.chain(chain_id)
            overrides = self.chain_settings(chain_id)
            chain_gas_price = overrides.get("gas_price") or 0.01
            entries.append(
                {
                    "chain_name": chain.name,
                    "chain_id": chain_id,
                    "pretty_name": overrides.get("pretty_name") or chain.name,
                    "status": "live",
                    "network_type": "testnet",
                    "bech32_prefix": chain.prefix,
                    "daemon_name": chain.binary or "gaiad",
                    "node_home": overrides.get("node_home") or "$HOME/.gaia",
                    "key_algos": ["secp256k1"],
                    "slip44": overrides.get("slip44") or 118,
                    "fees": {
                        "fee_tokens": [
                            {
                                "denom": chain.denom,
                                "fixed_min_gas_price": chain_gas_price,
                                "low_gas_price": chain_gas_price,
                                "average_gas_price": chain_gas_price,
                                "high_gas_price": chain_gas_price,
                            }
                        ]
                    },
                    "staking": {"staking_tokens": [{"denom": chain.denom}]},
                    "codebase": {
                        "git_repo": overrides.get("git_repo") or "",
                        "recommended_version": overrides.get("version") or "",
                        "compatible_versions": overrides.get("compatible_versions") or [],
                        "genesis": {"genesis_url": overrides.get("genesis_url") or ""},
                    },
                    "apis": {
                        "rpc": [
                            {"address": helpers.chain_address(chain.hostname, "rpc"), "provider": "starship"}
                        ],
                        "rest": [
                            {"address": helpers.chain_address(chain.hostname, "rest"), "provider": "starship"}
                        ],
                    },
                    "explorers": [],
                }
            )
        return _dump("Chain Registry Configuration", {"chains": entries})


class TsRelayerStatefulSetGenerator(RelayerStatefulSetGenerator):
    relayer_dir = "/root/.ts-relayer"

    def start_script(self) -> str:
        return 'RLY_INDEX=${HOSTNAME##*-}\necho "Relayer Index: $RLY_INDEX"\nts-relayer start'

    def init_script(self) -> str:
        parts = [
            "\n".join(
                [
                    "set -ux",
                    "",
                    "RLY_INDEX=${HOSTNAME##*-}",
                    'echo "Relayer Index: $RLY_INDEX"',
                    "",
                    "mkdir -p $RELAYER_DIR",
                    "cp /configs/app.yaml $RELAYER_DIR/",
                    "cp /configs/registry.yaml $RELAYER_DIR/",
                    "",
                    'MNEMONIC=$(jq -r ".relayers[$RLY_INDEX].mnemonic" $KEYS_CONFIG)',
                ]
            )
        ]
        for chain in self.chains():
            parts.append(
                "\n".join(
                    [
                        f'echo "Creating key for {chain.id}..."',
                        f'echo "$MNEMONIC" | ts-relayer keys restore {chain.id}'
                        f' --hd-path "{chain.hd_path or DEFAULT_HD_PATH}"',
                        "",
                        f"RLY_ADDR=$(ts-relayer keys show {chain.id})",
                        self.transfer_tokens(chain),
                    ]
                )
            )
        for channel in self.relayer.channels or []:
            action, message = (
                ("link", "Creating client, connection and channel...")
                if channel.new_connection
                else ("channel", "Creating channel...")
            )
            flags = [f"--src-port {channel.a_port}", f"--dst-port {channel.b_port}"]
            if channel.order:
                flags.append(f"--order {channel.order}")
            parts.append(
                f'echo "{message}"\n'
                f"ts-relayer tx {action} {channel.a_chain} {channel.b_chain or ''} \\\n  "
                + " \\\n  ".join(flags)
            )
        return "\n\n".join(parts) + "\n"


class TsRelayerBuilder(BaseRelayerBuilder):
    default_image = TS_RELAYER_IMAGE
    config_map_generator = TsRelayerConfigMapGenerator
    statefulset_generator = TsRelayerStatefulSetGenerator
