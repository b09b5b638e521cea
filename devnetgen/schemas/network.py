"""
Network Specification Schemas.

Typed models for the declarative description of a multi-chain devnet.

Design Principle:
    Input models keep every optional field as None and track which fields
    the user actually set. The resolver dumps them with exclude_unset, so a
    field the user never wrote can never overwrite a catalogue default.

    Field names are snake_case in Python and camelCase (or kebab-case for
    relayer channels) on the wire, matching the YAML documents users write.

Example (YAML):
    name: devnet
    chains:
      - id: osmosis-1
        name: osmosis
        numValidators: 2
    relayers:
      - name: osmos-cosmos
        type: hermes
        chains: [osmosis-1, cosmoshub-4]
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SpecModel(BaseModel):
    """Base for all input models: aliases on the wire, frozen once loaded."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    def explicit_fields(self) -> dict[str, Any]:
        """Dump only the fields that were explicitly set, using wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


# =============================================================================
# Shared building blocks
# =============================================================================


class Ports(SpecModel):
    """Named ports of an entity."""

    rest: int | None = None
    rpc: int | None = None
    grpc: int | None = None
    grpc_web: int | None = Field(None, alias="grpc-web")
    p2p: int | None = None
    exposer: int | None = None
    faucet: int | None = None
    ws: int | None = None
    cometmock: int | None = None


class Resources(SpecModel):
    """Either the short {cpu, memory} form or full limits/requests."""

    cpu: str | float | None = None
    memory: str | float | None = None
    limits: dict[str, Any] | None = None
    requests: dict[str, Any] | None = None


class Script(SpecModel):
    """A script reference: inline data or a file path."""

    name: str | None = None
    file: str | None = None
    data: str | None = None


# =============================================================================
# Chains
# =============================================================================


class CreditAmount(SpecModel):
    send: int | None = None
    stake: int | None = None


class FaucetSpec(SpecModel):
    enabled: bool | None = None
    type: Literal["starship", "cosmjs"] | None = None
    image: str | None = None
    concurrency: int | None = None
    ports: Ports | None = None
    resources: Resources | None = None
    # cosmjs-only settings
    gas_price: str | None = Field(None, alias="gasPrice")
    path_pattern: str | None = Field(None, alias="pathPattern")
    tokens: list[str] | None = None
    credit_amount: CreditAmount | None = Field(None, alias="creditAmount")
    max_credit: int | None = Field(None, alias="maxCredit")
    mnemonic: str | None = None

    @property
    def port(self) -> int:
        if self.ports is not None and self.ports.rest:
            return self.ports.rest
        return 8000


class UpgradeStep(SpecModel):
    name: str
    version: str


class UpgradeSpec(SpecModel):
    enabled: bool = False
    type: str | None = None
    genesis: str | None = None
    upgrades: list[UpgradeStep] = Field(default_factory=list)


class BuildSpec(SpecModel):
    enabled: bool = False
    source: str | None = None


class IcsSpec(SpecModel):
    enabled: bool = False
    image: str | None = None
    provider: str | None = None


class CometmockSpec(SpecModel):
    enabled: bool | None = None
    image: str | None = None


class ChainSpec(SpecModel):
    """
    One chain as written by the user.

    Only `id` and `name` are required; everything else may come from the
    default catalogue entry keyed by `name`.
    """

    id: str = Field(..., description="Chain id, unique within the network")
    name: str = Field(..., description="Chain family name, the catalogue key")
    num_validators: int | None = Field(None, alias="numValidators", ge=1)
    image: str | None = None
    home: str | None = None
    binary: str | None = None
    prefix: str | None = None
    denom: str | None = None
    pretty_name: str | None = Field(None, alias="prettyName")
    coins: str | None = None
    hd_path: str | None = Field(None, alias="hdPath")
    coin_type: int | None = Field(None, alias="coinType")
    metrics: bool | None = None
    repo: str | None = None
    assets: list[dict[str, Any]] | None = None
    upgrade: UpgradeSpec | None = None
    build: BuildSpec | None = None
    faucet: FaucetSpec | None = None
    ports: Ports | None = None
    genesis: dict[str, Any] | None = None
    scripts: dict[str, Script] | None = None
    env: list[dict[str, Any]] | None = None
    ics: IcsSpec | None = None
    cometmock: CometmockSpec | None = None
    balances: list[dict[str, Any]] | None = None
    readiness_probe: dict[str, Any] | None = Field(None, alias="readinessProbe")
    config: dict[str, Any] | None = None
    resources: Resources | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Numeric ids (e.g. EVM chain ids) are allowed on the wire
        if isinstance(value, int):
            return str(value)
        return value


class ResolvedChain(ChainSpec):
    """
    A chain after defaults resolution.

    Every sub-object that has a default at any level is present, and the
    derived fields (hostname, to_build, image) are computed.
    """

    num_validators: int = Field(1, alias="numValidators", ge=1)
    hostname: str
    to_build: bool = Field(False, alias="toBuild")
    faucet: FaucetSpec
    cometmock: CometmockSpec
    upgrade: UpgradeSpec
    build: BuildSpec
    scripts: dict[str, Script] = Field(default_factory=dict)

    @property
    def faucet_enabled(self) -> bool:
        return bool(self.faucet.enabled)

    @property
    def cometmock_enabled(self) -> bool:
        return bool(self.cometmock.enabled)

    @property
    def ics_enabled(self) -> bool:
        return self.ics is not None and self.ics.enabled


# =============================================================================
# Relayers
# =============================================================================


class ChannelSpec(SpecModel):
    a_chain: str = Field(..., alias="a-chain")
    b_chain: str | None = Field(None, alias="b-chain")
    a_port: str = Field(..., alias="a-port")
    b_port: str = Field(..., alias="b-port")
    a_connection: str | None = Field(None, alias="a-connection")
    new_connection: bool | None = Field(None, alias="new-connection")
    channel_version: int | str | None = Field(None, alias="channel-version")
    order: str | None = None


class RelayerSpec(SpecModel):
    name: str
    type: str = Field(..., description="hermes, go-relayer, ts-relayer or neutron-query-relayer")
    image: str | None = None
    replicas: int | None = Field(None, ge=0)
    chains: list[str] = Field(default_factory=list)
    channels: list[ChannelSpec] | None = None
    config: dict[str, Any] | None = None
    resources: Resources | None = None
    ports: Ports | None = None

    @property
    def fullname(self) -> str:
        return f"{self.type}-{self.name}"


class ResolvedRelayer(RelayerSpec):
    replicas: int = 1
    config: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Shared services
# =============================================================================


class RegistrySpec(SpecModel):
    enabled: bool = False
    image: str | None = None
    localhost: bool | None = None
    ports: Ports | None = None
    resources: Resources | None = None


class ExplorerSpec(SpecModel):
    enabled: bool = False
    type: str = "ping-pub"
    image: str | None = None
    localhost: bool | None = None
    ports: Ports | None = None
    resources: Resources | None = None


class CertManagerSpec(SpecModel):
    issuer: str | None = None


class IngressSpec(SpecModel):
    enabled: bool = False
    type: str = "nginx"
    host: str | None = None
    cert_manager: CertManagerSpec | None = Field(None, alias="certManager")
    resources: Resources | None = None


class FrontendSpec(SpecModel):
    name: str
    type: str = "custom"
    image: str
    replicas: int | None = None
    ports: Ports | None = None
    env: dict[str, str] | None = None
    resources: Resources | None = None


class ExposerSpec(SpecModel):
    image: str | None = None
    ports: Ports | None = None
    resources: Resources | None = None


class ResourceDefaults(SpecModel):
    node: Resources | None = None
    wait: Resources | None = None


class ImagePolicy(SpecModel):
    image_pull_policy: Literal["Always", "IfNotPresent", "Never"] = Field(
        "IfNotPresent", alias="imagePullPolicy"
    )


class TimeoutSpec(SpecModel):
    """CometBFT consensus timeouts, passed to chain containers as env vars."""

    time_iota_ms: int | None = None
    timeout_propose: str | None = None
    timeout_propose_delta: str | None = None
    timeout_prevote: str | None = None
    timeout_prevote_delta: str | None = None
    timeout_precommit: str | None = None
    timeout_precommit_delta: str | None = None
    timeout_commit: str | None = None


# =============================================================================
# Root
# =============================================================================


class NetworkSpec(SpecModel):
    """Root of the declarative devnet description."""

    name: str = Field(..., description="Release name, used in common labels")
    version: str | None = None
    chains: list[ChainSpec] = Field(default_factory=list)
    relayers: list[RelayerSpec] = Field(default_factory=list)
    registry: RegistrySpec | None = None
    explorer: ExplorerSpec | None = None
    ingress: IngressSpec | None = None
    frontends: list[FrontendSpec] = Field(default_factory=list)
    exposer: ExposerSpec | None = None
    resources: ResourceDefaults | None = None
    images: ImagePolicy | None = None
    timeouts: TimeoutSpec | None = None

    def find_chain(self, chain_id: str) -> ChainSpec | None:
        """Find a chain by id, or None."""
        for chain in self.chains:
            if chain.id == chain_id:
                return chain
        return None

    @property
    def chain_ids(self) -> list[str]:
        return [chain.id for chain in self.chains]

    @property
    def image_pull_policy(self) -> str:
        return self.images.image_pull_policy if self.images else "IfNotPresent"

    @property
    def registry_enabled(self) -> bool:
        return self.registry is not None and self.registry.enabled

    @property
    def explorer_enabled(self) -> bool:
        return self.explorer is not None and self.explorer.enabled

    @property
    def ingress_enabled(self) -> bool:
        return self.ingress is not None and self.ingress.enabled
