"""
Manifest Aggregator.

Runs every builder over a NetworkSpec and concatenates the results.

Design Principle:
    Output order is fixed and depends only on declaration order:

        1. global ConfigMaps (keys, setup-scripts), once
        2. chains, in declaration order
        3. relayers, in declaration order
        4. registry, explorer (if enabled)
        5. frontends, in declaration order
        6. ingress (if enabled)

    Nothing is deduplicated or reordered afterwards.

    Referential integrity is checked before any builder runs, so an
    invalid network never yields partial output.

Usage:
    aggregator = ManifestAggregator(context)
    manifests = aggregator.aggregate(network)
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from devnetgen.builders import (
    EntityBuilderFactory,
    ExplorerBuilder,
    FrontendBuilder,
    IngressBuilder,
    RegistryBuilder,
)
from devnetgen.errors import ConfigurationError, UnknownChainReferenceError
from devnetgen.runtime.resolver import chain_hostname

if TYPE_CHECKING:
    from devnetgen.builders import BuildContext
    from devnetgen.schemas import Manifest, NetworkSpec

logger = logging.getLogger(__name__)

MIN_RELAYER_CHAINS = 2


def validate_network(network: NetworkSpec) -> None:
    """
    Check cross-entity references of a network.

    Raises:
        ConfigurationError: On duplicate chain ids or hostnames, or a relayer linking
            fewer than two chains
        UnknownChainReferenceError: If a relayer names a missing chain
    """
    duplicates = sorted(chain_id for chain_id, count in Counter(network.chain_ids).items() if count > 1)
    if duplicates:
        raise ConfigurationError(f"Duplicate chain ids: {', '.join(duplicates)}")

    hostnames: dict[str, str] = {}
    for chain_id in network.chain_ids:
        hostname = chain_hostname(chain_id)
        if hostname in hostnames:
            raise ConfigurationError(
                f"Chain ids {hostnames[hostname]} and {chain_id} share the hostname {hostname}"
            )
        hostnames[hostname] = chain_id

    known = set(network.chain_ids)
    for relayer in network.relayers:
        if len(relayer.chains) < MIN_RELAYER_CHAINS:
            raise ConfigurationError(
                f"Relayer must link at least {MIN_RELAYER_CHAINS} chains, got {len(relayer.chains)}",
                relayer.fullname,
            )
        referenced = list(relayer.chains)
        for channel in relayer.channels or []:
            referenced.append(channel.a_chain)
            if channel.b_chain:
                referenced.append(channel.b_chain)
        for chain_id in referenced:
            if chain_id not in known:
                raise UnknownChainReferenceError(chain_id, relayer.fullname)


class ManifestAggregator:
    """Produces the full, ordered manifest list for a network."""

    def __init__(self, context: BuildContext, factory: EntityBuilderFactory | None = None):
        self.context = context
        self.factory = factory or EntityBuilderFactory(context)
        self.registry_builder = RegistryBuilder(context)
        self.explorer_builder = ExplorerBuilder(context)
        self.frontend_builder = FrontendBuilder(context)
        self.ingress_builder = IngressBuilder(context)

    def aggregate(self, network: NetworkSpec) -> list[Manifest]:
        validate_network(network)
        # Fail on unsupported relayer types before building anything
        relayer_builders = [
            self.factory.relayer_builder_for(relayer.type, relayer.fullname)
            for relayer in network.relayers
        ]

        manifests: list[Manifest] = []
        manifests.extend(self.global_manifests(network))

        for chain in network.chains:
            resolved = self.context.resolver.resolve_chain(chain)
            chain_manifests = self.factory.chain_builder_for(chain.name).build(resolved, network)
            logger.debug(f"[aggregator] Chain {chain.id}: {len(chain_manifests)} manifests")
            manifests.extend(chain_manifests)

        for relayer, builder in zip(network.relayers, relayer_builders):
            resolved = self.context.resolver.resolve_relayer(relayer)
            relayer_manifests = builder.build(resolved, network)
            logger.debug(f"[aggregator] Relayer {relayer.fullname}: {len(relayer_manifests)} manifests")
            manifests.extend(relayer_manifests)

        if network.registry_enabled:
            manifests.extend(self.registry_builder.build(network.registry, network))
        if network.explorer_enabled:
            manifests.extend(self.explorer_builder.build(network.explorer, network))
        for frontend in network.frontends:
            manifests.extend(self.frontend_builder.build(frontend, network))
        if network.ingress_enabled:
            manifests.extend(self.ingress_builder.build(network.ingress, network))

        logger.info(f"[aggregator] Network '{network.name}': {len(manifests)} manifests")
        return manifests

    def global_manifests(self, network: NetworkSpec) -> list[Manifest]:
        """Shared ConfigMaps, emitted once if any chain's builder needs them."""
        for chain in network.chains:
            builder = self.factory.chain_builder_for(chain.name)
            if builder.uses_global_configmaps:
                return builder.build_global(network)
        return []
