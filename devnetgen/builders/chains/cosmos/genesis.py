"""
Genesis StatefulSet for Cosmos-SDK chains.

The genesis node is always a single replica. It creates the genesis file,
serves it (and its keys) through the exposer sidecar, and hosts the faucet.

Init containers (in order):
    init-build-images   only when the chain is built from source
    init-genesis        create-genesis script
    init-config         update-config script (+ genesis patch mount)
    init-faucet         only for an enabled starship faucet
    init-ics            only for ICS consumer chains

Containers (in order):
    validator, exposer, faucet (only when enabled)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.chains.cosmos import containers
from devnetgen.errors import ScriptNotFoundError
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.builders.base import BuildContext
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain

logger = logging.getLogger(__name__)

STARSHIP_FAUCET_IMAGE = "busybox:1.34.1"
DEFAULT_CREDIT = 10000000
DEFAULT_MAX_CREDIT = 99999999
DEFAULT_FAUCET_GAS_PRICE = "0.025"
COSMJS_FAUCET_RESOURCES = {"cpu": "0.2", "memory": "200M"}
STARSHIP_FAUCET_RESOURCES = {"cpu": "0.1", "memory": "128M"}


def pod_labels(chain: ResolvedChain, network: NetworkSpec, role: str, version: str) -> dict[str, str]:
    """Labels on the pod template; NAME is what the node Service selects on."""
    return {
        labels.INSTANCE: network.name,
        labels.TYPE: chain.id,
        labels.NAME: f"{chain.hostname}-{role}",
        labels.RAWNAME: chain.id,
        labels.VERSION: version,
        labels.ROLE: role,
    }


def statefulset_labels(chain: ResolvedChain, network: NetworkSpec, role: str) -> dict[str, str]:
    result = helpers.chain_labels(chain, network, role, name=f"{chain.hostname}-{role}")
    result[labels.TYPE] = f"{chain.id}-statefulset"
    return result


class CosmosGenesisStatefulSetGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec, context: BuildContext):
        self.chain = chain
        self.network = network
        self.context = context

    @property
    def name(self) -> str:
        return f"{self.chain.hostname}-genesis"

    def generate(self) -> list[Manifest]:
        chain = self.chain
        spec = {
            "serviceName": self.name,
            "replicas": 1,
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
                        chain, self.network, "genesis", self.context.generator_version
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
                self.name, statefulset_labels(chain, self.network, "genesis"), spec
            )
        ]

    # -------------------------------------------------------------------------
    # Init containers
    # -------------------------------------------------------------------------

    def init_containers(self) -> list[dict[str, Any]]:
        chain = self.chain
        port = helpers.exposer_port(self.network, chain)

        result: list[dict[str, Any]] = []
        if chain.to_build:
            result.append(containers.build_images_init_container(chain, self.network))
        result.append(self.genesis_init_container())
        result.append(containers.config_init_container(chain, self.network))
        if chain.faucet_enabled and chain.faucet.type == "starship":
            result.append(self.faucet_init_container())
        if chain.ics_enabled:
            result.append(containers.ics_init_container(chain, self.network, port))
        return result

    def genesis_script(self) -> str:
        """Inline create-genesis script, or a call to the mounted copy."""
        script = self.chain.scripts.get("createGenesis")
        if script is not None:
            try:
                return self.context.scripts.get_script_content(script)
            except ScriptNotFoundError as e:
                logger.warning(
                    f"[chain] {e}. Falling back to mounted create-genesis script for {self.chain.id}."
                )
        return f"bash -e {containers.script_path(self.chain, 'createGenesis', 'create-genesis.sh')}"

    def genesis_init_container(self) -> dict[str, Any]:
        chain = self.chain
        return {
            "name": "init-genesis",
            "image": chain.image,
            "imagePullPolicy": self.network.image_pull_policy,
            "env": [
                *helpers.default_env_vars(chain),
                *helpers.chain_env_vars(chain),
                *helpers.timeout_env_vars(self.network),
                helpers.env("KEYS_CONFIG", helpers.KEYS_CONFIG),
                helpers.env("FAUCET_ENABLED", chain.faucet_enabled),
                helpers.env("NUM_VALIDATORS", chain.num_validators),
                helpers.env("NUM_RELAYERS", len(self.network.relayers)),
            ],
            "command": ["bash", "-c", self.genesis_script()],
            "resources": helpers.node_resources(chain, self.network),
            "volumeMounts": helpers.chain_volume_mounts(chain),
        }

    def faucet_init_container(self) -> dict[str, Any]:
        return {
            "name": "init-faucet",
            "image": self.chain.faucet.image,
            "imagePullPolicy": "IfNotPresent",
            "command": ["bash", "-c", "cp /bin/faucet /faucet/faucet && chmod +x /faucet/faucet"],
            "resources": helpers.node_resources(self.chain, self.network),
            "volumeMounts": [{"mountPath": "/faucet", "name": "faucet"}],
        }

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def main_containers(self) -> list[dict[str, Any]]:
        chain = self.chain
        port = helpers.exposer_port(self.network, chain)
        result = [self.validator_container(), containers.exposer_container(chain, self.network, port)]
        if chain.faucet_enabled:
            result.append(self.faucet_container())
        return result

    def validator_container(self) -> dict[str, Any]:
        chain = self.chain
        container: dict[str, Any] = {
            "name": "validator",
            "image": chain.image,
            "imagePullPolicy": self.network.image_pull_policy,
            "env": [
                *helpers.default_env_vars(chain),
                *helpers.chain_env_vars(chain),
                helpers.env("FAUCET_ENABLED", chain.faucet_enabled),
                helpers.env("SLOGFILE", "slog.slog"),
                *[helpers.env(item["name"], item.get("value")) for item in chain.env or []],
            ],
            "command": ["bash", "-c", containers.validator_start_script(chain)],
            "resources": helpers.node_resources(chain, self.network),
            "volumeMounts": helpers.chain_volume_mounts(chain),
        }
        probe = containers.readiness_probe(chain)
        if probe is not None:
            container["readinessProbe"] = probe
        return container

    def faucet_container(self) -> dict[str, Any]:
        if self.chain.faucet.type == "cosmjs":
            return self.cosmjs_faucet_container()
        return self.starship_faucet_container()

    def cosmjs_faucet_container(self) -> dict[str, Any]:
        chain = self.chain
        faucet = chain.faucet
        credit = faucet.credit_amount
        return {
            "name": "faucet",
            "image": faucet.image,
            "imagePullPolicy": self.network.image_pull_policy,
            "env": [
                helpers.env("FAUCET_CONCURRENCY", faucet.concurrency or 1),
                helpers.env("FAUCET_PORT", faucet.port),
                helpers.env("FAUCET_GAS_PRICE", faucet.gas_price or DEFAULT_FAUCET_GAS_PRICE),
                helpers.env("FAUCET_PATH_PATTERN", faucet.path_pattern or ""),
                helpers.env("FAUCET_ADDRESS_PREFIX", chain.prefix),
                helpers.env("FAUCET_TOKENS", ",".join(faucet.tokens) if faucet.tokens else chain.denom),
                helpers.env("FAUCET_CREDIT_AMOUNT_SEND", (credit and credit.send) or DEFAULT_CREDIT),
                helpers.env("FAUCET_CREDIT_AMOUNT_STAKE", (credit and credit.stake) or DEFAULT_CREDIT),
                helpers.env("FAUCET_MAX_CREDIT", faucet.max_credit or DEFAULT_MAX_CREDIT),
                helpers.env("FAUCET_MNEMONIC", faucet.mnemonic or ""),
                helpers.env("FAUCET_CHAIN_ID", chain.id),
                helpers.env("FAUCET_RPC_ENDPOINT", f"http://localhost:{helpers.PORT_MAP['rpc']}"),
            ],
            "command": ["yarn", "start"],
            "resources": helpers.resource_object(faucet.resources or COSMJS_FAUCET_RESOURCES),
            "volumeMounts": [{"mountPath": "/configs", "name": "addresses"}],
        }

    def starship_faucet_container(self) -> dict[str, Any]:
        chain = self.chain
        faucet = chain.faucet
        credit = faucet.credit_amount
        return {
            "name": "faucet",
            "image": STARSHIP_FAUCET_IMAGE,
            "imagePullPolicy": "IfNotPresent",
            "env": [
                helpers.env("FAUCET_CONCURRENCY", faucet.concurrency or 1),
                helpers.env("FAUCET_PORT", faucet.port),
                helpers.env("FAUCET_CHAIN_ID", chain.id),
                helpers.env("FAUCET_CHAIN_DENOM", chain.denom),
                helpers.env("FAUCET_CHAIN_PREFIX", chain.prefix),
                helpers.env("FAUCET_AMOUNT_SEND", (credit and credit.send) or DEFAULT_CREDIT),
                helpers.env("FAUCET_AMOUNT_STAKE", (credit and credit.stake) or DEFAULT_CREDIT),
                helpers.env("FAUCET_RPC_ENDPOINT", f"http://localhost:{helpers.PORT_MAP['rpc']}"),
                helpers.env("FAUCET_REST_ENDPOINT", f"http://localhost:{helpers.PORT_MAP['rest']}"),
            ],
            "command": ["sh", "-c", "/faucet/faucet"],
            "resources": helpers.resource_object(faucet.resources or STARSHIP_FAUCET_RESOURCES),
            "volumeMounts": [
                {"mountPath": "/configs", "name": "addresses"},
                {"mountPath": "/faucet", "name": "faucet"},
            ],
        }
