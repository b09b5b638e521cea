"""
Shared machinery for relayer builders.

Design Principle:
    Every relayer is a StatefulSet named <type>-<name>, configured from one
    ConfigMap of the same name, waiting on the genesis node of every chain
    it links. Only the config file format and start command differ between
    implementations, so subclasses supply those and inherit the rest.

    Chains are looked up by id and resolved against the catalogue, so a
    relayer sees the same denom and prefix the chain builder used. A
    relayer naming a chain id absent from the network is a hard error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devnetgen.builders import helpers
from devnetgen.builders.base import RelayerBuilder, run_generators
from devnetgen.errors import UnknownChainReferenceError
from devnetgen.schemas import manifest as labels
from devnetgen.schemas.manifest import Manifest

if TYPE_CHECKING:
    from devnetgen.builders.base import BuildContext
    from devnetgen.schemas.network import NetworkSpec, ResolvedChain, ResolvedRelayer

DEFAULT_RELAYER_RESOURCES = {"cpu": "0.2", "memory": "200M"}
DEFAULT_HD_PATH = "m/44'/118'/0'/0/0"

ETHERMINT_PUBKEYS = {
    "evmos": "/ethermint.crypto.v1.ethsecp256k1.PubKey",
    "injective": "/injective.crypto.v1beta1.ethsecp256k1.PubKey",
}


def address_type(chain_name: str) -> str:
    """Hermes address_type line for a chain family."""
    pk_type = ETHERMINT_PUBKEYS.get(chain_name)
    if pk_type:
        return f"address_type = {{ derivation = 'ethermint', proto_type = {{ pk_type = '{pk_type}' }} }}"
    return "address_type = { derivation = 'cosmos' }"


def gas_price(chain_name: str, denom: str | None) -> str:
    """Hermes gas_price line; ethermint chains need a much higher price."""
    price = "2500000" if chain_name in ETHERMINT_PUBKEYS else "1.25"
    return f'gas_price = {{ price = {price}, denom = "{denom}" }}'


def relayer_labels(relayer: ResolvedRelayer, network: NetworkSpec) -> dict[str, str]:
    return helpers.component_labels(
        network, "relayer", name=relayer.fullname, role=relayer.type
    )


class RelayerManifestGenerator:
    """Base for the per-relayer ConfigMap/Service/StatefulSet generators."""

    def __init__(self, relayer: ResolvedRelayer, network: NetworkSpec, context: BuildContext):
        self.relayer = relayer
        self.network = network
        self.context = context

    @property
    def fullname(self) -> str:
        return self.relayer.fullname

    @property
    def labels(self) -> dict[str, str]:
        return relayer_labels(self.relayer, self.network)

    def chain(self, chain_id: str) -> ResolvedChain:
        """Resolve a linked chain by id."""
        spec = self.network.find_chain(chain_id)
        if spec is None:
            raise UnknownChainReferenceError(chain_id, entity=self.fullname)
        return self.context.resolver.resolve_chain(spec)

    def chains(self) -> list[ResolvedChain]:
        return [self.chain(chain_id) for chain_id in self.relayer.chains]

    def settings(self, key: str) -> dict[str, Any]:
        """A section of the relayer's free-form config, or {}."""
        value = self.relayer.config.get(key)
        return value if isinstance(value, dict) else {}

    def chain_settings(self, chain_id: str) -> dict[str, Any]:
        """Per-chain overrides from config.chains[] matched by id."""
        for entry in self.relayer.config.get("chains") or []:
            if str(entry.get("id")) == chain_id:
                return entry
        return {}


class RelayerStatefulSetGenerator(RelayerManifestGenerator):
    """
    StatefulSet skeleton shared by all relayer implementations.

    Subclasses provide init_script() and start_script(); extra containers
    and volumes hook in through extra_init_containers(), extra_containers()
    and extra_volumes().
    """

    #: Where the relayer keeps its home directory inside the pod
    relayer_dir: str = "/root"

    def __init__(
        self,
        relayer: ResolvedRelayer,
        network: NetworkSpec,
        context: BuildContext,
        image: str,
    ):
        super().__init__(relayer, network, context)
        self.image = image

    def generate(self) -> list[Manifest]:
        relayer = self.relayer
        spec = {
            "serviceName": self.fullname,
            "replicas": relayer.replicas,
            "podManagementPolicy": "Parallel",
            "revisionHistoryLimit": 3,
            "selector": {
                "matchLabels": {
                    labels.INSTANCE: "relayer",
                    labels.TYPE: relayer.type,
                    labels.NAME: self.fullname,
                }
            },
            "template": {
                "metadata": {
                    "annotations": helpers.pod_annotations(),
                    "labels": {
                        labels.INSTANCE: "relayer",
                        labels.TYPE: relayer.type,
                        labels.NAME: self.fullname,
                        labels.RAWNAME: relayer.name,
                        labels.VERSION: self.context.generator_version,
                    },
                },
                "spec": {
                    "initContainers": [
                        *self.extra_init_containers(),
                        *self.wait_init_containers(),
                        self.relayer_init_container(),
                    ],
                    "containers": [self.relayer_container(), *self.extra_containers()],
                    "volumes": self.volumes(),
                },
            },
        }
        return [Manifest.stateful_set(self.fullname, self.labels, spec)]

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def init_script(self) -> str:
        raise NotImplementedError

    def start_script(self) -> str:
        raise NotImplementedError

    def extra_init_containers(self) -> list[dict[str, Any]]:
        return []

    def extra_containers(self) -> list[dict[str, Any]]:
        return []

    def extra_volumes(self) -> list[dict[str, Any]]:
        return []

    def extra_env(self) -> list[dict[str, Any]]:
        return []

    # -------------------------------------------------------------------------
    # Shared pieces
    # -------------------------------------------------------------------------

    @property
    def resources(self) -> dict[str, Any]:
        return helpers.resource_object(self.relayer.resources or DEFAULT_RELAYER_RESOURCES)

    def wait_init_containers(self) -> list[dict[str, Any]]:
        return [
            helpers.wait_init_container(chain.hostname, helpers.PORT_MAP["rpc"], self.network)
            for chain in self.chains()
        ]

    def volume_mounts(self) -> list[dict[str, str]]:
        return [
            {"mountPath": "/root", "name": "relayer"},
            {"mountPath": "/configs", "name": "relayer-config"},
            {"mountPath": "/keys", "name": "keys"},
            {"mountPath": "/scripts", "name": "scripts"},
        ]

    def volumes(self) -> list[dict[str, Any]]:
        return [
            {"name": "relayer", "emptyDir": {}},
            {"name": "relayer-config", "configMap": {"name": self.fullname}},
            {"name": "keys", "configMap": {"name": "keys"}},
            {"name": "scripts", "configMap": {"name": "setup-scripts"}},
            *self.extra_volumes(),
        ]

    def relayer_init_container(self) -> dict[str, Any]:
        return {
            "name": "init-relayer",
            "image": self.image,
            "imagePullPolicy": self.network.image_pull_policy,
            "env": [
                helpers.env("KEYS_CONFIG", "/keys/keys.json"),
                helpers.env("RELAYER_DIR", self.relayer_dir),
                helpers.env("RELAYER_INDEX", "${HOSTNAME##*-}"),
                helpers.namespace_env(),
                *self.extra_env(),
            ],
            "command": ["bash", "-c"],
            "args": [self.init_script()],
            "resources": self.resources,
            "volumeMounts": self.volume_mounts(),
        }

    def relayer_container(self) -> dict[str, Any]:
        return {
            "name": "relayer",
            "image": self.image,
            "imagePullPolicy": self.network.image_pull_policy,
            "env": [helpers.env("RELAYER_DIR", self.relayer_dir), *self.extra_env()],
            "command": ["bash", "-c"],
            "args": [self.start_script()],
            "resources": self.resources,
            "securityContext": {"allowPrivilegeEscalation": False, "runAsUser": 0},
            "volumeMounts": [
                {"mountPath": "/root", "name": "relayer"},
                {"mountPath": "/configs", "name": "relayer-config"},
            ],
        }

    def transfer_tokens(self, chain: ResolvedChain, address_var: str = "$RLY_ADDR") -> str:
        """Best-effort faucet top-up of the relayer account on one chain."""
        faucet_host = f"{chain.hostname}-genesis.$NAMESPACE.svc.cluster.local:{chain.faucet.port}"
        return "\n".join(
            [
                f'echo "Transfer tokens to address {address_var}"',
                "bash -e /scripts/transfer-tokens.sh \\",
                f"  {address_var} \\",
                f"  {chain.denom} \\",
                f"  http://{faucet_host}/credit \\",
                f'  "{str(chain.faucet_enabled).lower()}" || true',
            ]
        )


class BaseRelayerBuilder(RelayerBuilder):
    """
    Relayer builder composed of ConfigMap, optional Service, StatefulSet.

    Subclasses set the generator classes; the Service generator is only
    used when needs_service is True.
    """

    config_map_generator: type[RelayerManifestGenerator]
    service_generator: type[RelayerManifestGenerator] | None = None
    statefulset_generator: type[RelayerStatefulSetGenerator]

    def build(self, relayer: ResolvedRelayer, network: NetworkSpec) -> list[Manifest]:
        generators: list[Any] = [self.config_map_generator(relayer, network, self.context)]
        if self.needs_service and self.service_generator is not None:
            generators.append(self.service_generator(relayer, network, self.context))
        generators.append(
            self.statefulset_generator(relayer, network, self.context, self.image_for(relayer))
        )
        return run_generators(generators)
