"""
Schemas for devnetgen.

Input models (NetworkSpec and friends), resolved entity models, and the
Manifest output value object.
"""

from .manifest import Manifest
from .network import (
    BuildSpec,
    ChainSpec,
    ChannelSpec,
    CometmockSpec,
    CreditAmount,
    ExplorerSpec,
    ExposerSpec,
    FaucetSpec,
    FrontendSpec,
    IcsSpec,
    ImagePolicy,
    IngressSpec,
    NetworkSpec,
    Ports,
    RegistrySpec,
    RelayerSpec,
    ResolvedChain,
    ResolvedRelayer,
    ResourceDefaults,
    Resources,
    Script,
    TimeoutSpec,
    UpgradeSpec,
    UpgradeStep,
)

__all__ = [
    "BuildSpec",
    "ChainSpec",
    "ChannelSpec",
    "CometmockSpec",
    "CreditAmount",
    "ExplorerSpec",
    "ExposerSpec",
    "FaucetSpec",
    "FrontendSpec",
    "IcsSpec",
    "ImagePolicy",
    "IngressSpec",
    "Manifest",
    "NetworkSpec",
    "Ports",
    "RegistrySpec",
    "RelayerSpec",
    "ResolvedChain",
    "ResolvedRelayer",
    "ResourceDefaults",
    "Resources",
    "Script",
    "TimeoutSpec",
    "UpgradeSpec",
    "UpgradeStep",
]
