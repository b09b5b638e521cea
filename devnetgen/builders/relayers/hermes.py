"""
Hermes relayer.

Manifests (in order):
    ConfigMap    hermes-<name>  config.toml and config-cli.toml
    Service      hermes-<name>  rest 3000 and the exposer port
    StatefulSet  hermes-<name>  relayer + exposer sidecar

The CLI config is the same file with every key_name suffixed "-cli", so
manual `hermes` commands run with their own account and never race the
running relayer for sequence numbers.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.relayers.base import (
    DEFAULT_HD_PATH,
    BaseRelayerBuilder,
    RelayerManifestGenerator,
    RelayerStatefulSetGenerator,
    address_type,
    gas_price,
)
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.schemas.network import ChannelSpec

HERMES_IMAGE = "ghcr.io/cosmology-tech/starship/hermes:1.10.0"
HERMES_EXPOSER_IMAGE = "ghcr.io/cosmology-tech/starship/exposer:v0.2.0"
HERMES_REST_PORT = 3000
HERMES_TELEMETRY_PORT = 3001
EXPOSER_RESOURCES = {"cpu": "0.1", "memory": "100M"}

KEY_NAME_PATTERN = re.compile(r'key_name = "([^"]+)"')


def _toml(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def cli_config(config_toml: str) -> str:
    """Suffix every key_name with -cli."""
    return KEY_NAME_PATTERN.sub(r'key_name = "\1-cli"', config_toml)


class HermesConfigMapGenerator(RelayerManifestGenerator):
    def generate(self) -> list[Manifest]:
        config_toml = self.config_toml()
        return [
            Manifest.config_map(
                self.fullname,
                self.labels,
                {"config.toml": config_toml, "config-cli.toml": cli_config(config_toml)},
            )
        ]

    def config_toml(self) -> str:
        global_ = self.settings("global")
        mode = self.settings("mode")
        rest = self.settings("rest")
        telemetry = self.settings("telemetry")

        def mode_value(section: str, key: str, default: Any) -> str:
            value = (mode.get(section) or {}).get(key)
            return _toml(default if value is None else value)

        def value(section: dict[str, Any], key: str, default: Any) -> str:
            found = section.get(key)
            return _toml(default if found is None else found)

        lines = [
            "# The global section has parameters that apply globally to the relayer operation.",
            "[global]",
            f'log_level = "{value(global_, "log_level", "info")}"',
            "",
            "[mode]",
            "[mode.clients]",
            f"enabled = {mode_value('clients', 'enabled', True)}",
            f"refresh = {mode_value('clients', 'refresh', True)}",
            f"misbehaviour = {mode_value('clients', 'misbehaviour', True)}",
            "",
            "[mode.connections]",
            f"enabled = {mode_value('connections', 'enabled', True)}",
            "",
            "[mode.channels]",
            f"enabled = {mode_value('channels', 'enabled', True)}",
            "",
            "[mode.packets]",
            f"enabled = {mode_value('packets', 'enabled', True)}",
            f"clear_interval = {mode_value('packets', 'clear_interval', 100)}",
            f"clear_on_start = {mode_value('packets', 'clear_on_start', True)}",
            f"tx_confirmation = {mode_value('packets', 'tx_confirmation', True)}",
            "",
            "[rest]",
            f"enabled = {value(rest, 'enabled', True)}",
            f'host = "{value(rest, "host", "0.0.0.0")}"',
            f"port = {value(rest, 'port', HERMES_REST_PORT)}",
            "",
            "[telemetry]",
            f"enabled = {value(telemetry, 'enabled', True)}",
            f'host = "{value(telemetry, "host", "0.0.0.0")}"',
            f"port = {value(telemetry, 'port', HERMES_TELEMETRY_PORT)}",
            "",
        ]
        for chain_id in self.relayer.chains:
            lines.extend(self.chain_section(chain_id))
        return "\n".join(lines) + "\n"

    def chain_section(self, chain_id: str) -> list[str]:
        chain = self.chain(chain_id)
        overrides = self.chain_settings(chain_id)
        event_source = self.settings("event_source")
        host = f"{chain.hostname}-genesis.$(NAMESPACE).svc.cluster.local"

        def value(key: str, default: Any) -> str:
            found = overrides.get(key)
            return _toml(default if found is None else found)

        if event_source.get("mode") == "pull":
            interval = event_source.get("interval", "500ms")
            event_line = f"event_source = {{ mode = 'pull', interval = '{interval}' }}"
        else:
            batch_delay = event_source.get("batch_delay", "500ms")
            event_line = (
                f"event_source = {{ mode = 'push', url = \"ws://{host}:{helpers.PORT_MAP['rpc']}/websocket\", "
                f"batch_delay = '{batch_delay}' }}"
            )

        trust = overrides.get("trust_threshold") or {}
        section = [
            "",
            "[[chains]]",
            f'id = "{chain_id}"',
            'type = "CosmosSdk"',
            f'key_name = "{chain_id}"',
        ]
        if chain.ics_enabled:
            section.append("ccv_consumer_chain = true")
        section.extend(
            [
                f'rpc_addr = "http://{host}:{helpers.PORT_MAP["rpc"]}"',
                f'grpc_addr = "http://{host}:{helpers.PORT_MAP["grpc"]}"',
                event_line,
                "trusted_node = false",
                f'account_prefix = "{value("account_prefix", chain.prefix)}"',
                f"default_gas = {value('default_gas', 500000000)}",
                f"max_gas = {value('max_gas', 1000000000)}",
                f'rpc_timeout = "{value("rpc_timeout", "10s")}"',
                f'store_prefix = "{value("store_prefix", "ibc")}"',
                f"gas_multiplier = {value('gas_multiplier', 2)}",
                f"max_msg_num = {value('max_msg_num', 30)}",
                f"max_tx_size = {value('max_tx_size', 2097152)}",
                f'clock_drift = "{value("clock_drift", "5s")}"',
                f'max_block_time = "{value("max_block_time", "30s")}"',
                f'trusting_period = "{value("trusting_period", "75s")}"',
                f'trust_threshold = {{ numerator = "{trust.get("numerator", "2")}", '
                f'denominator = "{trust.get("denominator", "3")}" }}',
                address_type(chain.name),
                gas_price(chain.name, chain.denom),
            ]
        )
        return section


class HermesServiceGenerator(RelayerManifestGenerator):
    def generate(self) -> list[Manifest]:
        rest_port = self.settings("rest").get("port") or HERMES_REST_PORT
        exposer_port = helpers.exposer_port(self.network)
        return [
            Manifest.service(
                self.fullname,
                self.labels,
                {
                    "clusterIP": "None",
                    "ports": [
                        {"name": "rest", "port": HERMES_REST_PORT, "protocol": "TCP", "targetPort": rest_port},
                        {"name": "exposer", "port": exposer_port, "protocol": "TCP", "targetPort": exposer_port},
                    ],
                    "selector": {labels.NAME: self.fullname},
                },
            )
        ]


class HermesStatefulSetGenerator(RelayerStatefulSetGenerator):
    relayer_dir = "/root/.hermes"

    def extra_init_containers(self) -> list[dict[str, Any]]:
        exposer = self.network.exposer
        return [
            {
                "name": "init-exposer",
                "image": exposer.image if exposer and exposer.image else HERMES_EXPOSER_IMAGE,
                "imagePullPolicy": self.network.image_pull_policy,
                "command": ["bash", "-c"],
                "args": [
                    "# Install exposer binary from the image\n"
                    "cp /bin/exposer /exposer/exposer\n"
                    "chmod +x /exposer/exposer"
                ],
                "resources": helpers.resource_object(self.relayer.resources or EXPOSER_RESOURCES),
                "volumeMounts": [{"mountPath": "/exposer", "name": "exposer"}],
            }
        ]

    def extra_containers(self) -> list[dict[str, Any]]:
        exposer = self.network.exposer
        port = helpers.exposer_port(self.network)
        return [
            {
                "name": "exposer",
                "image": self.image,
                "imagePullPolicy": self.network.image_pull_policy,
                "env": [
                    helpers.env("EXPOSER_HTTP_PORT", port),
                    helpers.env("EXPOSER_GRPC_PORT", helpers.EXPOSER_GRPC_PORT),
                ],
                "command": ["bash", "-c"],
                "args": ["/exposer/exposer"],
                "resources": helpers.resource_object(
                    exposer.resources if exposer and exposer.resources else EXPOSER_RESOURCES
                ),
                "securityContext": {"allowPrivilegeEscalation": False, "runAsUser": 0},
                "volumeMounts": [
                    {"mountPath": "/root", "name": "relayer"},
                    {"mountPath": "/configs", "name": "relayer-config"},
                    {"mountPath": "/exposer", "name": "exposer"},
                ],
            }
        ]

    def extra_volumes(self) -> list[dict[str, Any]]:
        return [{"name": "exposer", "emptyDir": {}}]

    def start_script(self) -> str:
        return 'RLY_INDEX=${HOSTNAME##*-}\necho "Relayer Index: $RLY_INDEX"\nhermes start'

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
                    "cp /configs/config.toml $RELAYER_DIR/config.toml",
                    "cp /configs/config-cli.toml $RELAYER_DIR/config-cli.toml",
                    "",
                    'MNEMONIC=$(jq -r ".relayers[$RLY_INDEX].mnemonic" $KEYS_CONFIG)',
                    "echo $MNEMONIC > $RELAYER_DIR/mnemonic.txt",
                    'MNEMONIC_CLI=$(jq -r ".relayers_cli[$RLY_INDEX].mnemonic" $KEYS_CONFIG)',
                    "echo $MNEMONIC_CLI > $RELAYER_DIR/mnemonic-cli.txt",
                ]
            )
        ]
        for chain in self.chains():
            parts.append(
                "\n".join(
                    [
                        f'echo "Creating key for {chain.id}..."',
                        "hermes keys add \\",
                        f"  --chain {chain.id} \\",
                        "  --mnemonic-file $RELAYER_DIR/mnemonic.txt \\",
                        f"  --key-name {chain.id} \\",
                        f'  --hd-path "{chain.hd_path or DEFAULT_HD_PATH}"',
                        "",
                        f"RLY_ADDR=$(hermes --json keys list --chain {chain.id}"
                        f" | tail -1 | jq -r '.result.\"{chain.id}\".account')",
                        self.transfer_tokens(chain),
                    ]
                )
            )
        for channel in self.relayer.channels or []:
            parts.append(self.create_channel(channel))
        return "\n\n".join(parts) + "\n"

    def create_channel(self, channel: ChannelSpec) -> str:
        flags = []
        if channel.new_connection:
            flags.append("--new-client-connection --yes")
        if channel.b_chain:
            flags.append(f"--b-chain {channel.b_chain}")
        if channel.a_connection:
            flags.append(f"--a-connection {channel.a_connection}")
        if channel.channel_version:
            flags.append(f"--channel-version {channel.channel_version}")
        if channel.order:
            flags.append(f"--order {channel.order}")
        flags.extend(
            [
                f"--a-chain {channel.a_chain}",
                f"--a-port {channel.a_port}",
                f"--b-port {channel.b_port}",
            ]
        )
        return "hermes create channel \\\n  " + " \\\n  ".join(flags)


class HermesRelayerBuilder(BaseRelayerBuilder):
    default_image = HERMES_IMAGE
    needs_service = True
    config_map_generator = HermesConfigMapGenerator
    service_generator = HermesServiceGenerator
    statefulset_generator = HermesStatefulSetGenerator
