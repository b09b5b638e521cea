"""
ConfigMap generators for Cosmos-SDK chains.

Per chain (in order):
    setup-scripts-<hostname>      chain scripts, role setup-scripts
    patch-<hostname>              genesis override, role genesis-patch
    consumer-proposal-<hostname>  ICS proposal, role ics-proposal

Global (once per network, labelled part-of=global):
    keys            configs/keys.json
    setup-scripts   every scripts/default/*.sh
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from devnetgen.builders import helpers
from devnetgen.builders.base import run_generators
from devnetgen.errors import ScriptNotFoundError
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.builders.base import BuildContext, ManifestGenerator
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain

logger = logging.getLogger(__name__)

# Consumer chain parameters for the ICS proposal
ICS_UNBONDING_PERIOD = 294000000000
ICS_CCV_TIMEOUT_PERIOD = 259920000000
ICS_TRANSFER_TIMEOUT_PERIOD = 18000000000
ICS_DEPOSIT_AMOUNT = 10000


def _global_labels(network: NetworkSpec) -> dict[str, str]:
    return {
        **helpers.common_labels(network),
        labels.COMPONENT: "configmap",
        labels.PART_OF: "global",
    }


class KeysConfigMapGenerator:
    """The shared mnemonic file, mounted by every chain and relayer."""

    def __init__(self, network: NetworkSpec, context: BuildContext):
        self.network = network
        self.context = context

    def generate(self) -> list[Manifest]:
        keys_file = self.context.settings.keys_file
        if not keys_file.is_file():
            logger.warning(f"[chain] '{keys_file}' not found. Skipping keys ConfigMap.")
            return []
        try:
            content = keys_file.read_text()
        except OSError as e:
            logger.warning(f"[chain] Could not read '{keys_file}': {e}. Skipping keys ConfigMap.")
            return []
        return [Manifest.config_map("keys", _global_labels(self.network), {"keys.json": content})]


class GlobalScriptsConfigMapGenerator:
    """The shared shell-script bundle from scripts/default."""

    def __init__(self, network: NetworkSpec, context: BuildContext):
        self.network = network
        self.context = context

    def generate(self) -> list[Manifest]:
        try:
            data = self.context.scripts.shared_scripts(self.context.settings.shared_scripts_dir)
        except OSError as e:
            logger.warning(f"[chain] Could not read global scripts directory: {e}. Skipping.")
            return []
        if not data:
            return []
        return [Manifest.config_map("setup-scripts", _global_labels(self.network), data)]


class GlobalConfigMapGenerator:
    """ConfigMaps shared by every chain of the network."""

    def __init__(self, network: NetworkSpec, context: BuildContext):
        self.generators: list[ManifestGenerator] = [
            KeysConfigMapGenerator(network, context),
            GlobalScriptsConfigMapGenerator(network, context),
        ]

    def generate(self) -> list[Manifest]:
        return run_generators(self.generators)


class SetupScriptsConfigMapGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec, context: BuildContext):
        self.chain = chain
        self.network = network
        self.context = context

    def generate(self) -> list[Manifest]:
        data: dict[str, str] = {}
        for key, script in self.chain.scripts.items():
            script_name = script.name or f"{key}.sh"
            try:
                data[script_name] = self.context.scripts.get_script_content(script)
            except ScriptNotFoundError as e:
                logger.warning(
                    f"[chain] Could not load script {script_name} for {self.chain.id}: {e}. Skipping."
                )

        if not data:
            return []

        return [
            Manifest.config_map(
                f"setup-scripts-{self.chain.hostname}",
                helpers.chain_labels(self.chain, self.network, "setup-scripts"),
                data,
            )
        ]


class GenesisPatchConfigMapGenerator:
    def __init__(self, chain: ResolvedChain, network: NetworkSpec):
        self.chain = chain
        self.network = network

    def generate(self) -> list[Manifest]:
        if not self.chain.genesis:
            return []
        return [
            Manifest.config_map(
                f"patch-{self.chain.hostname}",
                helpers.chain_labels(self.chain, self.network, "genesis-patch"),
                {"genesis.json": json.dumps(self.chain.genesis, indent=2)},
            )
        ]


class IcsConsumerProposalConfigMapGenerator:
    """
    Consumer-addition proposal for an interchain-security consumer chain.

    The deposit is denominated in the provider chain's (resolved) denom,
    so the provider has to exist in the network. A missing provider is a
    soft failure: warn and emit nothing.
    """

    def __init__(self, chain: ResolvedChain, network: NetworkSpec, context: BuildContext):
        self.chain = chain
        self.network = network
        self.context = context

    def generate(self) -> list[Manifest]:
        ics = self.chain.ics
        if ics is None or not ics.enabled or not ics.provider:
            return []

        provider_spec = self.network.find_chain(ics.provider)
        if provider_spec is None:
            logger.warning(
                f"[chain] ICS provider chain '{ics.provider}' not found. "
                f"Skipping ICS proposal for '{self.chain.id}'."
            )
            return []

        provider = self.context.resolver.resolve_chain(provider_spec)
        proposal = {
            "title": f"Add {self.chain.name} consumer chain",
            "summary": f"Add {self.chain.name} consumer chain with id {self.chain.id}",
            "chain_id": self.chain.id,
            "initial_height": {"revision_height": 1, "revision_number": 1},
            "genesis_hash": "d86d756e10118e66e6805e9cc476949da2e750098fcc7634fd0cc77f57a0b2b0",
            "binary_hash": "376cdbd3a222a3d5c730c9637454cd4dd925e2f9e2e0d0f3702fc922928583f1",
            "spawn_time": "2023-02-28T20:40:00.000000Z",
            "unbonding_period": ICS_UNBONDING_PERIOD,
            "ccv_timeout_period": ICS_CCV_TIMEOUT_PERIOD,
            "transfer_timeout_period": ICS_TRANSFER_TIMEOUT_PERIOD,
            "consumer_redistribution_fraction": "0.75",
            "blocks_per_distribution_transmission": 10,
            "historical_entries": 100,
            "distribution_transmission_channel": "",
            "top_N": 95,
            "validators_power_cap": 0,
            "validator_set_cap": 0,
            "allowlist": [],
            "denylist": [],
            "deposit": f"{ICS_DEPOSIT_AMOUNT}{provider.denom or ''}",
        }
        return [
            Manifest.config_map(
                f"consumer-proposal-{self.chain.hostname}",
                helpers.chain_labels(self.chain, self.network, "ics-proposal"),
                {"proposal.json": json.dumps(proposal, indent=2)},
            )
        ]


class CosmosConfigMapGenerator:
    """All per-chain ConfigMaps, in a fixed order."""

    def __init__(self, chain: ResolvedChain, network: NetworkSpec, context: BuildContext):
        self.generators: list[ManifestGenerator] = [
            SetupScriptsConfigMapGenerator(chain, network, context),
            GenesisPatchConfigMapGenerator(chain, network),
            IcsConsumerProposalConfigMapGenerator(chain, network, context),
        ]

    def generate(self) -> list[Manifest]:
        return run_generators(self.generators)
