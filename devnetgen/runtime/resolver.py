"""
Configuration Resolver.

Turns a partial user entity into a fully-resolved one by layering it over
the default catalogue.

Design Principle:
    The resolver is a pure function of (catalogue, user spec). It does no
    IO after the catalogue is loaded, holds no per-run state, and two
    resolutions of the same spec are always equal.

Precedence (highest first):
    1. fields the user explicitly set
    2. the catalogue entry keyed by the discriminant (chain name, relayer type)
    3. global defaults (faucet-type defaults, cometmock image, shared scripts)

Flow (chain):
    1. merged = deep_merge(defaultChains[name], user)
    2. faucet = deep_merge({enabled, type}, defaultFaucet[type], merged.faucet)
    3. cometmock = deep_merge({enabled: false}, defaultCometmock, merged.cometmock)
    4. scripts = deep_merge(defaultScripts, merged.scripts)
    5. derive hostname, to_build and image

Usage:
    resolver = ConfigResolver.for_project(Path("."))
    resolved = resolver.resolve_chain(ChainSpec(id="osmosis-1", name="osmosis"))
    resolved.hostname   # "osmosis-1"
"""

from __future__ import annotations

import logging
from pathlib import Path

from devnetgen.runtime.catalogue import DefaultCatalogue
from devnetgen.runtime.merge import deep_merge
from devnetgen.schemas.network import ChainSpec, RelayerSpec, ResolvedChain, ResolvedRelayer

logger = logging.getLogger(__name__)

# Kubernetes DNS label limit
MAX_HOSTNAME_LENGTH = 63

RUNNER_IMAGE = "ghcr.io/cosmology-tech/starship/runner:latest"
BUILDER_IMAGE = "ghcr.io/cosmology-tech/starship/builder:latest"

DEFAULT_FAUCET = {"enabled": True, "type": "starship"}
DEFAULT_COMETMOCK = {"enabled": False}
DEFAULT_UPGRADE = {"enabled": False}
DEFAULT_BUILD = {"enabled": False}


def chain_hostname(chain_id: str) -> str:
    """Normalize a chain id into a DNS-safe hostname."""
    return str(chain_id).replace("_", "-")[:MAX_HOSTNAME_LENGTH]


class ConfigResolver:
    """
    Resolves chains and relayers against a DefaultCatalogue.

    Safe to share across concurrent pipeline runs: the catalogue is
    read-only and the resolver keeps no state of its own.
    """

    def __init__(self, catalogue: DefaultCatalogue | None = None):
        self._catalogue = catalogue or DefaultCatalogue.empty()

    @classmethod
    def for_project(
        cls,
        project_root: str | Path,
        *,
        defaults_file: str | Path | None = None,
    ) -> ConfigResolver:
        """Build a resolver from <project_root>/configs/defaults.yaml."""
        path = Path(defaults_file) if defaults_file else Path(project_root) / "configs" / "defaults.yaml"
        return cls(DefaultCatalogue.from_file(path))

    @property
    def catalogue(self) -> DefaultCatalogue:
        return self._catalogue

    def resolve_chain(self, spec: ChainSpec) -> ResolvedChain:
        """Merge a chain spec with its defaults and compute derived fields."""
        merged = deep_merge(self._catalogue.chain_defaults(spec.name), spec.explicit_fields())
        if not self._catalogue.has_chain(spec.name):
            logger.debug(f"[resolver] No catalogue entry for chain '{spec.name}' ({spec.id})")

        faucet_type = (merged.get("faucet") or {}).get("type") or DEFAULT_FAUCET["type"]
        merged["faucet"] = deep_merge(
            DEFAULT_FAUCET,
            self._catalogue.faucet_defaults(faucet_type),
            merged.get("faucet"),
        )
        merged["cometmock"] = deep_merge(
            DEFAULT_COMETMOCK,
            self._catalogue.cometmock_defaults(),
            merged.get("cometmock"),
        )
        merged["scripts"] = deep_merge(self._catalogue.default_scripts(), merged.get("scripts"))
        merged["upgrade"] = deep_merge(DEFAULT_UPGRADE, merged.get("upgrade"))
        merged["build"] = deep_merge(DEFAULT_BUILD, merged.get("build"))

        to_build = bool(merged["upgrade"].get("enabled") or merged["build"].get("enabled"))
        merged["hostname"] = chain_hostname(spec.id)
        merged["toBuild"] = to_build
        if to_build:
            merged["image"] = RUNNER_IMAGE

        return ResolvedChain.model_validate(merged)

    def resolve_relayer(self, spec: RelayerSpec) -> ResolvedRelayer:
        """Merge a relayer spec with the catalogue entry for its type."""
        merged = deep_merge(self._catalogue.relayer_defaults(spec.type), spec.explicit_fields())
        return ResolvedRelayer.model_validate(merged)
