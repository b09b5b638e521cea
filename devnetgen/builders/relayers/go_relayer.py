"""
Go relayer (rly).

Manifests (in order):
    ConfigMap    go-relayer-<name>  path.json + <chain-id>.json per chain
    StatefulSet  go-relayer-<name>

Without explicit channels, path.json holds one path named "path" linking
the first two chains over the transfer port.
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
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import ChannelSpec

GO_RELAYER_IMAGE = "ghcr.io/cosmology-tech/starship/go-relayer:v2.4.1"
DEFAULT_PORT = "transfer"


def _path_end(chain_id: str, port: str, connection: str = "") -> dict[str, str]:
    # client, connection and channel ids are filled in by `rly tx link`
    return {
        "chain-id": chain_id,
        "client-id": "",
        "connection-id": connection,
        "channel-id": "",
        "port-id": port,
    }


def _path(src: dict[str, str], dst: dict[str, str]) -> dict[str, Any]:
    return {"src": src, "dst": dst, "src-channel-filter": {"rule": None, "channel-list": []}}


class GoRelayerConfigMapGenerator(RelayerManifestGenerator):
    def generate(self) -> list[Manifest]:
        data = {"path.json": self.path_config()}
        for chain_id in self.relayer.chains:
            data[f"{chain_id}.json"] = self.chain_config(chain_id)
        return [Manifest.config_map(self.fullname, self.labels, data)]

    def paths(self) -> dict[str, Any]:
        channels: list[ChannelSpec] = self.relayer.channels or []
        if channels:
            return {
                f"path{index}": _path(
                    _path_end(channel.a_chain, channel.a_port, channel.a_connection or ""),
                    _path_end(channel.b_chain or "", channel.b_port),
                )
                for index, channel in enumerate(channels)
            }
        if len(self.relayer.chains) >= 2:
            src, dst = self.relayer.chains[0], self.relayer.chains[1]
            return {"path": _path(_path_end(src, DEFAULT_PORT), _path_end(dst, DEFAULT_PORT))}
        return {}

    def path_config(self) -> str:
        return json.dumps({"paths": self.paths()}, indent=2)

    def chain_config(self, chain_id: str) -> str:
        chain = self.chain(chain_id)
        overrides = self.chain_settings(chain_id)
        config = {
            "type": "cosmos",
            "value": {
                "key": chain_id,
                "chain-id": chain_id,
                "rpc-addr": helpers.chain_address(chain.hostname, "rpc"),
                "account-prefix": overrides.get("account_prefix") or chain.prefix,
                "keyring-backend": "test",
                "gas-adjustment": overrides.get("gas_adjustment") or 1.2,
                "gas-prices": f"{overrides.get('gas_prices') or '0.01'}{chain.denom}",
                "min-gas-amount": overrides.get("min_gas_amount") or 0,
                "debug": bool(overrides.get("debug")),
                "timeout": overrides.get("timeout") or "20s",
                "block-timeout": overrides.get("block_timeout") or "",
                "output-format": "json",
                "sign-mode": "direct",
                "extra-codecs": overrides.get("extra_codecs") or [],
            },
        }
        return json.dumps(config, indent=2)


class GoRelayerStatefulSetGenerator(RelayerStatefulSetGenerator):
    relayer_dir = "/root/.relayer"

    def start_script(self) -> str:
        return 'RLY_INDEX=${HOSTNAME##*-}\necho "Relayer Index: $RLY_INDEX"\nrly start'

    def init_script(self) -> str:
        parts = [
            "\n".join(
                [
                    "set -ux",
                    "",
                    "RLY_INDEX=${HOSTNAME##*-}",
                    'echo "Relayer Index: $RLY_INDEX"',
                    "",
                    "mkdir -p $RELAYER_DIR/config",
                    "cp /configs/path.json $RELAYER_DIR/config/",
                    "",
                    'MNEMONIC=$(jq -r ".relayers[$RLY_INDEX].mnemonic" $KEYS_CONFIG)',
                ]
            )
        ]
        for chain in self.chains():
            parts.append(
                "\n".join(
                    [
                        f'echo "Setting up chain {chain.id}..."',
                        f"cp /configs/{chain.id}.json $RELAYER_DIR/config/",
                        f"rly chains add --file /configs/{chain.id}.json {chain.id}",
                        "",
                        f'echo "Creating key for {chain.id}..."',
                        f'echo "$MNEMONIC" | rly keys restore {chain.id} {chain.id}'
                        " --restore-key-type secp256k1 --coin-type 118",
                        "",
                        f"RLY_ADDR=$(rly keys show {chain.id} {chain.id})",
                        self.transfer_tokens(chain),
                    ]
                )
            )

        channels = self.relayer.channels or []
        if channels:
            parts.append('echo "Adding paths..."\nrly paths add --file /configs/path.json')
        for index, channel in enumerate(channels):
            path_name = f"path{index}"
            if channel.new_connection:
                parts.append(
                    f'echo "Creating client, connection and channel for {path_name}..."\n'
                    f"rly tx link {path_name} --src-port {channel.a_port} --dst-port {channel.b_port}"
                )
            else:
                order = f" --order {channel.order}" if channel.order else ""
                parts.append(
                    f'echo "Creating channel for {path_name}..."\n'
                    f"rly tx channel {path_name} --src-port {channel.a_port}"
                    f" --dst-port {channel.b_port}{order}"
                )
        return "\n\n".join(parts) + "\n"


class GoRelayerBuilder(BaseRelayerBuilder):
    default_image = GO_RELAYER_IMAGE
    config_map_generator = GoRelayerConfigMapGenerator
    statefulset_generator = GoRelayerStatefulSetGenerator
