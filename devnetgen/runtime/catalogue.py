"""
Default Catalogue.

Static per-discriminant defaults, loaded once from configs/defaults.yaml.

File Format (defaults.yaml):
    defaultChains:
      osmosis:
        image: ghcr.io/cosmology-tech/starship/osmosis:v25.0.0
        home: /root/.osmosisd
        binary: osmosisd
        ...
    defaultFaucet:
      starship: {image: ..., concurrency: 5}
      cosmjs:   {image: ..., concurrency: 5}
    defaultRelayers:
      hermes: {image: ..., config: {...}}
    defaultScripts:
      createGenesis: {name: create-genesis.sh, file: scripts/default/create-genesis.sh}
    defaultCometmock:
      image: ghcr.io/informalsystems/cometmock:v0.37.x

Design Principle:
    Loading never fails the pipeline. A missing or unreadable file is
    logged and the catalogue is empty, which makes every lookup return {}
    and turns the defaults layer of the merge into the identity.

    Lookups return deep copies, so a catalogue can be shared between
    concurrent pipeline runs without anyone mutating it.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

SECTIONS = (
    "defaultChains",
    "defaultFaucet",
    "defaultRelayers",
    "defaultScripts",
    "defaultCometmock",
)


class DefaultCatalogue:
    """
    Read-only table of defaults keyed by entity discriminant.

    Usage:
        catalogue = DefaultCatalogue.from_file("configs/defaults.yaml")
        catalogue.chain_defaults("osmosis")   # {} when unknown
        catalogue.faucet_defaults("cosmjs")
    """

    def __init__(self, data: dict[str, Any] | None = None, *, source: Path | None = None):
        data = data or {}
        self._data: dict[str, dict[str, Any]] = {
            section: dict(data.get(section) or {}) for section in SECTIONS
        }
        self._source = source

    @classmethod
    def empty(cls) -> DefaultCatalogue:
        return cls()

    @classmethod
    def from_file(cls, path: str | Path) -> DefaultCatalogue:
        """
        Load the catalogue from a YAML file.

        Never raises: a missing, unreadable or malformed file yields an
        empty catalogue and a warning.
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"[catalogue] Defaults file not found at {path}, using empty defaults")
            return cls(source=path)

        try:
            with path.open() as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"[catalogue] Failed to load {path}: {e}, using empty defaults")
            return cls(source=path)

        if not isinstance(data, dict):
            logger.warning(f"[catalogue] {path} does not contain a mapping, using empty defaults")
            return cls(source=path)

        catalogue = cls(data, source=path)
        logger.debug(
            f"[catalogue] Loaded {len(catalogue.chain_names)} chain defaults from {path}"
        )
        return catalogue

    @property
    def source(self) -> Path | None:
        return self._source

    @property
    def chain_names(self) -> list[str]:
        return list(self._data["defaultChains"])

    @property
    def relayer_types(self) -> list[str]:
        return list(self._data["defaultRelayers"])

    def has_chain(self, name: str) -> bool:
        return name in self._data["defaultChains"]

    def chain_defaults(self, name: str) -> dict[str, Any]:
        return self._lookup("defaultChains", name)

    def faucet_defaults(self, faucet_type: str) -> dict[str, Any]:
        return self._lookup("defaultFaucet", faucet_type)

    def relayer_defaults(self, relayer_type: str) -> dict[str, Any]:
        return self._lookup("defaultRelayers", relayer_type)

    def default_scripts(self) -> dict[str, Any]:
        return copy.deepcopy(self._data["defaultScripts"])

    def cometmock_defaults(self) -> dict[str, Any]:
        return copy.deepcopy(self._data["defaultCometmock"])

    def _lookup(self, section: str, key: str) -> dict[str, Any]:
        entry = self._data[section].get(key)
        if not isinstance(entry, dict):
            return {}
        return copy.deepcopy(entry)
