"""
Container fragments shared by the genesis and validator StatefulSets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.runtime.resolver import BUILDER_IMAGE

if TYPE_CHECKING:
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain

COSMOVISOR_INSTALL = "go install github.com/cosmos/cosmos-sdk/cosmovisor/cmd/cosmovisor@v1.0.0"
DEFAULT_EXPOSER_RESOURCES = {"cpu": "0.1", "memory": "128M"}


def script_path(chain: ResolvedChain, key: str, default: str) -> str:
    """Mount path of a chain script inside /scripts."""
    script = chain.scripts.get(key)
    if script is not None and script.name:
        return f"/scripts/{script.name}"
    return f"/scripts/{default}"


def build_commands(chain: ResolvedChain) -> list[str]:
    """
    Shell lines for the init-build-images container.

    One line builds the genesis version; with upgrades enabled, one more
    line per declared upgrade follows, in declaration order.
    """
    build_script = script_path(chain, "buildChain", "build-chain.sh")
    commands = ["# Install cosmovisor", COSMOVISOR_INSTALL, "", "# Build genesis"]
    if chain.upgrade.enabled:
        commands.append(
            f"UPGRADE_NAME=genesis CODE_TAG={chain.upgrade.genesis} bash -e {build_script}"
        )
        for upgrade in chain.upgrade.upgrades:
            commands.append(
                f"UPGRADE_NAME={upgrade.name} CODE_TAG={upgrade.version} bash -e {build_script}"
            )
    elif chain.build.enabled:
        commands.append(
            f"UPGRADE_NAME=genesis CODE_TAG={chain.build.source} bash -e {build_script}"
        )
    return commands


def build_images_init_container(chain: ResolvedChain, network: NetworkSpec) -> dict[str, Any]:
    return {
        "name": "init-build-images",
        "image": BUILDER_IMAGE,
        "imagePullPolicy": "IfNotPresent",
        "command": ["bash", "-c", "\n".join(build_commands(chain))],
        "env": [
            helpers.env("CODE_REF", chain.repo),
            helpers.env("UPGRADE_DIR", f"{chain.home}/cosmovisor"),
            helpers.env("GOBIN", "/go/bin"),
            helpers.env("CHAIN_NAME", chain.id),
            *helpers.default_env_vars(chain),
        ],
        "resources": helpers.node_resources(chain, network),
        "volumeMounts": helpers.chain_volume_mounts(chain),
    }


def config_init_container(
    chain: ResolvedChain,
    network: NetworkSpec,
    extra_env: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """init-config: applies update-config and, if present, the genesis patch."""
    volume_mounts = helpers.chain_volume_mounts(chain)
    if chain.genesis:
        volume_mounts.append({"mountPath": "/patch", "name": "patch"})
    return {
        "name": "init-config",
        "image": chain.image,
        "imagePullPolicy": network.image_pull_policy,
        "env": [
            *helpers.default_env_vars(chain),
            *helpers.chain_env_vars(chain),
            *helpers.timeout_env_vars(network),
            *(extra_env or []),
            helpers.env("KEYS_CONFIG", helpers.KEYS_CONFIG),
            helpers.env("METRICS", bool(chain.metrics)),
        ],
        "command": ["bash", "-c", f"bash -e {script_path(chain, 'updateConfig', 'update-config.sh')}"],
        "resources": helpers.node_resources(chain, network),
        "volumeMounts": volume_mounts,
    }


def ics_init_container(chain: ResolvedChain, network: NetworkSpec, exposer_port: int) -> dict[str, Any]:
    provider = chain.ics.provider if chain.ics else None
    provider_host = helpers.genesis_host(provider.replace("_", "-")) if provider else ""
    return {
        "name": "init-ics",
        "image": chain.image,
        "imagePullPolicy": network.image_pull_policy,
        "env": [
            *helpers.default_env_vars(chain),
            *helpers.chain_env_vars(chain),
            helpers.namespace_env(),
            helpers.env("KEYS_CONFIG", helpers.KEYS_CONFIG),
            helpers.env("EXPOSER_PORT", exposer_port),
        ],
        "command": [
            "bash",
            "-c",
            "\n".join(
                [
                    "VAL_INDEX=${HOSTNAME##*-}",
                    'echo "Validator Index: $VAL_INDEX"',
                    'echo "Fetching priv keys from provider exposer"',
                    f"curl -s http://{provider_host}:{exposer_port}/priv_keys"
                    " | jq > $CHAIN_DIR/config/provider_priv_validator_key.json",
                    'echo "Replace provider priv validator key with provider keys"',
                    "mv $CHAIN_DIR/config/provider_priv_validator_key.json"
                    " $CHAIN_DIR/config/priv_validator_key.json",
                ]
            ),
        ],
        "resources": helpers.node_resources(chain, network),
        "volumeMounts": helpers.chain_volume_mounts(chain),
    }


def readiness_probe(chain: ResolvedChain) -> dict[str, Any] | None:
    """Readiness probe for the validator container; None under cometmock."""
    if chain.cometmock_enabled:
        return None
    if chain.readiness_probe:
        return dict(chain.readiness_probe)
    return {
        "exec": {
            "command": [
                "bash",
                "-e",
                script_path(chain, "chainRpcReady", "chain-rpc-ready.sh"),
                f"http://localhost:{helpers.PORT_MAP['rpc']}",
            ]
        },
        "initialDelaySeconds": 10,
        "periodSeconds": 10,
        "timeoutSeconds": 15,
    }


def validator_start_script(chain: ResolvedChain) -> str:
    return "\n".join(
        [
            "#!/bin/bash",
            "set -euo pipefail",
            "",
            f'echo "Starting {chain.binary} validator..."',
            f"exec {chain.binary} start --home {chain.home} --log_level info",
        ]
    )


def exposer_container(chain: ResolvedChain, network: NetworkSpec, port: int) -> dict[str, Any]:
    exposer = network.exposer
    return {
        "name": "exposer",
        "image": (exposer.image if exposer and exposer.image else helpers.EXPOSER_IMAGE),
        "imagePullPolicy": network.image_pull_policy,
        "env": [
            *helpers.genesis_env_vars(chain, port),
            helpers.env("EXPOSER_HTTP_PORT", port),
            helpers.env("EXPOSER_GRPC_PORT", helpers.EXPOSER_GRPC_PORT),
            helpers.env("EXPOSER_GENESIS_FILE", f"{chain.home}/config/genesis.json"),
            helpers.env("EXPOSER_MNEMONIC_FILE", helpers.KEYS_CONFIG),
            helpers.env("EXPOSER_PRIV_VAL_FILE", f"{chain.home}/config/priv_validator_key.json"),
            helpers.env("EXPOSER_NODE_KEY_FILE", f"{chain.home}/config/node_key.json"),
            helpers.env("EXPOSER_NODE_ID_FILE", f"{chain.home}/config/node_id.json"),
            helpers.env(
                "EXPOSER_PRIV_VAL_STATE_FILE", f"{chain.home}/data/priv_validator_state.json"
            ),
        ],
        "command": ["exposer"],
        "resources": helpers.resource_object(
            exposer.resources if exposer and exposer.resources else DEFAULT_EXPOSER_RESOURCES
        ),
        "volumeMounts": [
            {"mountPath": chain.home or "/root", "name": "node"},
            {"mountPath": "/configs", "name": "addresses"},
        ],
    }
