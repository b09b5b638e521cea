"""
devnetgen - Kubernetes manifests for multi-chain blockchain test networks.

devnetgen turns a declarative network description (chains, relayers,
registry, explorer, frontends, ingress) into a tree of Kubernetes YAML
files:

- **Default Catalogue**: per-chain and per-relayer defaults merged beneath
  what the user writes
- **Builders**: one per chain family, relayer type and shared service
- **Label-driven output**: every manifest's file path follows from its
  labels alone

Quick Start:
    >>> from devnetgen import build, load_network_spec
    >>>
    >>> network = load_network_spec("devnet.yaml")
    >>> build(network, "out/", project_root=".")
"""

__version__ = "0.1.0"
__license__ = "MIT"

from devnetgen.config import GeneratorSettings, configure_logging, get_settings
from devnetgen.errors import (
    ConfigurationError,
    GeneratorError,
    OutputTargetError,
    UnknownChainReferenceError,
    UnsupportedRelayerTypeError,
)
from devnetgen.generator import Generator, build, generate, load_network_spec
from devnetgen.schemas import Manifest, NetworkSpec

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Pipeline
    "Generator",
    "build",
    "generate",
    "load_network_spec",
    # Settings
    "GeneratorSettings",
    "configure_logging",
    "get_settings",
    # Models
    "Manifest",
    "NetworkSpec",
    # Errors
    "ConfigurationError",
    "GeneratorError",
    "OutputTargetError",
    "UnknownChainReferenceError",
    "UnsupportedRelayerTypeError",
]
