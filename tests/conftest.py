"""
Pytest configuration and fixtures for devnetgen tests.
"""

import json
import sys
from pathlib import Path

import pytest
import yaml

# Add the repository root to path for imports
# This allows `from devnetgen.runtime import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from devnetgen.builders import BuildContext  # noqa: E402
from devnetgen.config import GeneratorSettings  # noqa: E402
from devnetgen.runtime import ConfigResolver, DefaultCatalogue, ScriptProvider  # noqa: E402

SAMPLE_CATALOGUE = {
    "defaultChains": {
        "osmosis": {
            "image": "ghcr.io/cosmology-tech/starship/osmosis:v25.0.0",
            "home": "/root/.osmosisd",
            "binary": "osmosisd",
            "prefix": "osmo",
            "denom": "uosmo",
            "prettyName": "Osmosis",
            "coins": "100000000000000uosmo",
            "hdPath": "m/44'/118'/0'/0/0",
            "coinType": 118,
            "ports": {"rest": 1317, "rpc": 26657},
            "assets": [{"base": "uosmo", "symbol": "OSMO"}],
        },
        "cosmoshub": {
            "image": "ghcr.io/cosmology-tech/starship/gaia:v18.1.0",
            "home": "/root/.gaia",
            "binary": "gaiad",
            "prefix": "cosmos",
            "denom": "uatom",
            "coins": "100000000000000uatom",
            "coinType": 118,
        },
        "neutron": {
            "image": "ghcr.io/cosmology-tech/starship/neutron:v4.0.1",
            "home": "/root/.neutrond",
            "binary": "neutrond",
            "prefix": "neutron",
            "denom": "untrn",
            "coinType": 118,
        },
        "ethereum": {
            "image": "ghcr.io/hyperweb-io/starship/ethereum/client-go:v1.14.12",
            "faucet": {"enabled": False},
        },
    },
    "defaultFaucet": {
        "starship": {"image": "ghcr.io/cosmology-tech/starship/faucet:latest", "concurrency": 5},
        "cosmjs": {"image": "ghcr.io/cosmology-tech/starship/cosmjs-faucet:v0.31.1", "concurrency": 3},
    },
    "defaultRelayers": {
        "hermes": {
            "image": "ghcr.io/cosmology-tech/starship/hermes:1.10.0",
            "replicas": 1,
            "config": {"rest": {"enabled": True, "port": 3000}},
        },
        "go-relayer": {"image": "ghcr.io/cosmology-tech/starship/go-relayer:v2.4.1"},
    },
    "defaultScripts": {
        "createGenesis": {"name": "create-genesis.sh", "file": "scripts/default/create-genesis.sh"},
        "updateConfig": {"name": "update-config.sh", "file": "scripts/default/update-config.sh"},
    },
    "defaultCometmock": {"image": "ghcr.io/informalsystems/cometmock:v0.37.x"},
}

SAMPLE_KEYS = {
    "genesis": [{"name": "genesis", "mnemonic": "test genesis mnemonic"}],
    "relayers": [{"name": "rly1", "mnemonic": "test relayer mnemonic"}],
    "relayers_cli": [{"name": "rly-cli1", "mnemonic": "test relayer cli mnemonic"}],
}


# =============================================================================
# Project layout
# =============================================================================


def write_project(root: Path, catalogue: dict | None = None) -> Path:
    """Lay out configs/ and scripts/default/ below root."""
    (root / "configs").mkdir(parents=True, exist_ok=True)
    (root / "scripts" / "default").mkdir(parents=True, exist_ok=True)
    with open(root / "configs" / "defaults.yaml", "w") as f:
        yaml.safe_dump(catalogue or SAMPLE_CATALOGUE, f, sort_keys=False)
    with open(root / "configs" / "keys.json", "w") as f:
        json.dump(SAMPLE_KEYS, f)
    (root / "scripts" / "default" / "create-genesis.sh").write_text("#!/bin/bash\necho genesis\n")
    (root / "scripts" / "default" / "update-config.sh").write_text("#!/bin/bash\necho config\n")
    return root


@pytest.fixture
def project_root(tmp_path):
    """Temporary project root with a catalogue, keys file and shared scripts."""
    return write_project(tmp_path / "project")


@pytest.fixture
def settings(project_root):
    return GeneratorSettings(project_root=project_root, generator_version="0.1.0-test")


@pytest.fixture
def catalogue():
    return DefaultCatalogue(SAMPLE_CATALOGUE)


@pytest.fixture
def resolver(catalogue):
    return ConfigResolver(catalogue)


@pytest.fixture
def context(resolver, project_root, settings):
    """BuildContext backed by the temporary project."""
    return BuildContext(
        resolver=resolver,
        scripts=ScriptProvider(project_root),
        settings=settings,
    )


@pytest.fixture
def two_chain_network():
    """Two chains and a hermes relayer, as written by a user."""
    return {
        "name": "devnet",
        "chains": [
            {"id": "osmosis-1", "name": "osmosis", "numValidators": 2},
            {"id": "cosmoshub-4", "name": "cosmoshub", "numValidators": 2},
        ],
        "relayers": [
            {
                "name": "osmos-cosmos",
                "type": "hermes",
                "chains": ["osmosis-1", "cosmoshub-4"],
            }
        ],
    }
