"""
Builder for chain families deployed outside this manifest set.

Chains such as solana are still valid network members (relayers and the
registry may reference them) but have no manifests of their own here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from devnetgen.builders.base import ChainBuilder

if TYPE_CHECKING:
    from devnetgen.schemas.manifest import Manifest
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain

logger = logging.getLogger(__name__)


class NonManifestChainBuilder(ChainBuilder):
    def build(self, chain: ResolvedChain, network: NetworkSpec) -> list[Manifest]:
        logger.debug(f"[chain] '{chain.name}' ({chain.id}) produces no manifests")
        return []
