"""
Validator StatefulSet for Cosmos-SDK chains.

Only emitted when a chain runs more than one validator; it carries the
remaining numValidators - 1 replicas. Every replica recovers its key from
the shared mnemonic, fetches genesis from the genesis node's exposer, and
peers with the genesis node.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.chains.cosmos import containers
from devnetgen.builders.chains.cosmos.genesis import pod_labels, statefulset_labels
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.builders.base import BuildContext
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain

COPY_BINARY = "cp $CHAIN_DIR/cosmovisor/genesis/bin/$CHAIN_BIN /usr/bin"
COMETMOCK_START_ARGS = (
    'START_ARGS="--grpc-web.enable=false --transport=grpc '
    '--with-tendermint=false --address tcp://0.0.0.0:26658"'
)


def _lines(*parts: str | None) -> str:
    return "\n".join(part for part in parts if part is not None)


class CosmosValidatorStatefulSetGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec, context: BuildContext):
        self.chain = chain
        self.network = network
        self.context = context

    @property
    def name(self) -> str:
        return f"{self.chain.hostname}-validator"

    def generate(self) -> list[Manifest]:
        chain = self.chain
        if chain.num_validators <= 1:
            return []

        spec = {
            "serviceName": self.name,
            "podManagementPolicy": "Parallel",
            "replicas": chain.num_validators - 1,
            "revisionHistoryLimit": 3,
            "selector": {
                "matchLabels": {
                    labels.INSTANCE: self.network.name,
                    labels.NAME: self.name,
                }
            },
            "template": {
                "metadata": {
                    "annotations": helpers.pod_annotations(),
                    "labels": pod_labels(
                        chain, self.network, "validator", self.context.generator_version
                    ),
                },
                "spec": {
                    "initContainers": self.init_containers(),
                    "containers": self.main_containers(),
                    "volumes": helpers.chain_volumes(chain),
                },
            },
        }
        return [
            Manifest.stateful_set(
                self.name, statefulset_labels(chain, self.network, "validator"), spec
            )
        ]

    @property
    def port(self) -> int:
        return helpers.exposer_port(self.network, self.chain)

    # -------------------------------------------------------------------------
    # Init containers
    # -------------------------------------------------------------------------

    def init_containers(self) -> list[dict[str, Any]]:
        chain = self.chain
        result: list[dict[str, Any]] = []
        if chain.to_build:
            result.append(containers.build_images_init_container(chain, self.network))
        result.append(helpers.wait_init_container(chain.hostname, self.port, self.network))
        result.append(self.validator_init_container())
        result.append(self.config_init_container())
        if chain.ics_enabled:
            result.append(containers.ics_init_container(chain, self.network, self.port))
        return result

    def validator_init_container(self) -> dict[str, Any]:
        chain = self.chain
        script = _lines(
            "VAL_INDEX=${HOSTNAME##*-}",
            'echo "Validator Index: $VAL_INDEX"',
            COPY_BINARY if chain.to_build else None,
            "",
            "if [ -f $CHAIN_DIR/config/genesis.json ]; then",
            '  echo "Genesis file exists, exiting early"',
            "  exit 0",
            "fi",
            "",
            'VAL_NAME=$(jq -r ".validators[0].name" $KEYS_CONFIG)-$VAL_INDEX',
            'echo "Recover validator $VAL_NAME"',
            "$CHAIN_BIN init $VAL_NAME --chain-id $CHAIN_ID",
            'jq -r ".validators[0].mnemonic" $KEYS_CONFIG'
            ' | $CHAIN_BIN keys add $VAL_NAME --index $VAL_INDEX --recover --keyring-backend="test"',
            "",
            "curl http://$GENESIS_HOST.$NAMESPACE.svc.cluster.local:$GENESIS_PORT/genesis"
            " -o $CHAIN_DIR/config/genesis.json",
            "",
            "NODE_ID=$($CHAIN_BIN tendermint show-node-id)",
            "echo '{\"node_id\":\"'$NODE_ID'\"}' > $CHAIN_DIR/config/node_id.json",
        )
        return {
            "name": "init-validator",
            "image": chain.image,
            "imagePullPolicy": self.network.image_pull_policy,
            "env": [
                *helpers.default_env_vars(chain),
                *helpers.chain_env_vars(chain),
                *helpers.timeout_env_vars(self.network),
                *helpers.genesis_env_vars(chain, self.port),
                helpers.env("KEYS_CONFIG", helpers.KEYS_CONFIG),
                helpers.env("FAUCET_ENABLED", chain.faucet_enabled),
                helpers.env("METRICS", bool(chain.metrics)),
            ],
            "command": ["bash", "-c", script],
            "resources": helpers.node_resources(chain, self.network),
            "volumeMounts": helpers.chain_volume_mounts(chain),
        }

    def config_init_container(self) -> dict[str, Any]:
        chain = self.chain
        container = containers.config_init_container(
            chain, self.network, extra_env=helpers.genesis_env_vars(chain, self.port)
        )
        genesis_p2p = f"$NODE_ID@$GENESIS_HOST.$NAMESPACE.svc.cluster.local:{helpers.PORT_MAP['p2p']}"
        container["command"] = [
            "bash",
            "-c",
            _lines(
                "VAL_INDEX=${HOSTNAME##*-}",
                'echo "Validator Index: $VAL_INDEX"',
                COPY_BINARY if chain.to_build else None,
                "",
                container["command"][2],
                "",
                "NODE_ID=$(curl -s http://$GENESIS_HOST.$NAMESPACE.svc.cluster.local:$GENESIS_PORT/node_id"
                ' | jq -r ".node_id")',
                'if [[ $NODE_ID == "" ]]; then',
                '  echo "Node ID is null, exiting early"',
                "  exit 1",
                "fi",
                "",
                f"GENESIS_NODE_P2P={genesis_p2p}",
                'sed -i "s/persistent_peers = \\"\\"/persistent_peers = \\"$GENESIS_NODE_P2P\\"/g"'
                " $CHAIN_DIR/config/config.toml",
            ),
        ]
        return container

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def main_containers(self) -> list[dict[str, Any]]:
        return [
            self.validator_container(),
            containers.exposer_container(self.chain, self.network, self.port),
        ]

    def start_script(self) -> str:
        chain = self.chain
        start = (
            _lines(COPY_BINARY, "/usr/bin/cosmovisor start $START_ARGS")
            if chain.to_build
            else "$CHAIN_BIN start $START_ARGS"
        )
        return _lines(
            "set -eux",
            'START_ARGS=""',
            COMETMOCK_START_ARGS if chain.cometmock_enabled else None,
            "",
            "# Starting the chain",
            start,
        )

    def post_start_script(self) -> str:
        chain = self.chain
        rpc_ready = containers.script_path(chain, "chainRpcReady", "chain-rpc-ready.sh")
        faucet_port = chain.faucet.port
        return _lines(
            f"until bash -e {rpc_ready} http://localhost:{helpers.PORT_MAP['rpc']}; do",
            "  sleep 10",
            "done",
            "",
            "set -eux",
            "VAL_INDEX=${HOSTNAME##*-}",
            'VAL_NAME="$(jq -r ".validators[0].name" $KEYS_CONFIG)-$VAL_INDEX"',
            'VAL_ADDR=$($CHAIN_BIN keys show $VAL_NAME -a --keyring-backend="test")',
            f"bash -e {containers.script_path(chain, 'transferTokens', 'transfer-tokens.sh')} \\",
            "  $VAL_ADDR \\",
            "  $DENOM \\",
            f"  http://$GENESIS_HOST.$NAMESPACE.svc.cluster.local:{faucet_port}/credit \\",
            f'  "{str(chain.faucet_enabled).lower()}" || true',
            "",
            f"VAL_NAME=$VAL_NAME bash -e {containers.script_path(chain, 'createValidator', 'create-validator.sh')}",
        )

    def validator_container(self) -> dict[str, Any]:
        chain = self.chain
        container: dict[str, Any] = {
            "name": "validator",
            "image": chain.image,
            "imagePullPolicy": self.network.image_pull_policy,
            "env": [
                *helpers.default_env_vars(chain),
                *helpers.chain_env_vars(chain),
                *helpers.genesis_env_vars(chain, self.port),
                helpers.env("KEYS_CONFIG", helpers.KEYS_CONFIG),
                helpers.env("SLOGFILE", "slog.slog"),
                *[helpers.env(item["name"], item.get("value")) for item in chain.env or []],
            ],
            "command": ["bash", "-c", self.start_script()],
            "resources": helpers.node_resources(chain, self.network),
            "volumeMounts": helpers.chain_volume_mounts(chain),
        }
        # ICS consumers get their validator set from the provider
        if not (chain.cometmock_enabled or chain.ics_enabled):
            container["lifecycle"] = {
                "postStart": {"exec": {"command": ["bash", "-c", "-e", self.post_start_script()]}}
            }
        probe = containers.readiness_probe(chain)
        if probe is not None:
            container["readinessProbe"] = probe
        return container
