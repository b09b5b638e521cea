"""
Tests for the runtime layer.

Tests for:
- deep_merge
- DefaultCatalogue
- ConfigResolver
- ScriptProvider
"""

import logging

import pytest

from devnetgen.errors import ScriptNotFoundError
from devnetgen.runtime import ConfigResolver, DefaultCatalogue, ScriptProvider, chain_hostname, deep_merge
from devnetgen.runtime.resolver import RUNNER_IMAGE
from devnetgen.schemas import ChainSpec, RelayerSpec, Script

# =============================================================================
# deep_merge
# =============================================================================


class TestDeepMerge:
    """Tests for the layering primitive."""

    def test_override_wins_for_scalars(self):
        """A key present on both sides takes the override value."""
        assert deep_merge({"a": 1, "b": 2}, {"a": 10}) == {"a": 10, "b": 2}

    def test_nested_maps_merge_recursively(self):
        """Maps on both sides are merged key by key."""
        base = {"faucet": {"enabled": True, "type": "starship", "concurrency": 5}}
        override = {"faucet": {"type": "cosmjs"}}

        assert deep_merge(base, override) == {
            "faucet": {"enabled": True, "type": "cosmjs", "concurrency": 5}
        }

    def test_lists_replaced_wholesale(self):
        """Lists are never concatenated."""
        assert deep_merge({"tokens": ["a", "b"]}, {"tokens": ["c"]}) == {"tokens": ["c"]}

    def test_none_never_erases(self):
        """An override value of None keeps the base value."""
        assert deep_merge({"image": "x"}, {"image": None}) == {"image": "x"}

    def test_scalar_replaces_map(self):
        """A scalar override replaces a map outright."""
        assert deep_merge({"ports": {"rpc": 1}}, {"ports": 5}) == {"ports": 5}

    def test_absent_everywhere_stays_absent(self):
        """Keys no layer defines do not appear."""
        assert "denom" not in deep_merge({"a": 1}, {"b": 2})

    def test_inputs_not_mutated(self):
        """Neither base nor override is modified."""
        base = {"faucet": {"enabled": True}}
        override = {"faucet": {"type": "cosmjs"}}
        deep_merge(base, override)

        assert base == {"faucet": {"enabled": True}}
        assert override == {"faucet": {"type": "cosmjs"}}

    def test_multiple_layers_later_wins(self):
        """Later layers take precedence over earlier ones."""
        assert deep_merge({"a": 1}, {"a": 2}, {"a": 3}) == {"a": 3}

    def test_none_layers_ignored(self):
        """None layers behave like empty maps."""
        assert deep_merge(None, {"a": 1}, None) == {"a": 1}

    def test_key_order_follows_base(self):
        """Keys keep base order, new keys appended in override order."""
        merged = deep_merge({"b": 1, "a": 1}, {"c": 1, "a": 2})
        assert list(merged) == ["b", "a", "c"]


# =============================================================================
# DefaultCatalogue
# =============================================================================


class TestDefaultCatalogue:
    """Tests for catalogue loading and lookups."""

    def test_from_file(self, project_root):
        """Loads sections from a YAML file."""
        catalogue = DefaultCatalogue.from_file(project_root / "configs" / "defaults.yaml")

        assert "osmosis" in catalogue.chain_names
        assert catalogue.chain_defaults("osmosis")["denom"] == "uosmo"
        assert catalogue.relayer_defaults("hermes")["image"].endswith("hermes:1.10.0")

    def test_missing_file_is_empty(self, tmp_path, caplog):
        """A missing file logs a warning and yields empty defaults."""
        with caplog.at_level(logging.WARNING):
            catalogue = DefaultCatalogue.from_file(tmp_path / "missing.yaml")

        assert catalogue.chain_names == []
        assert catalogue.chain_defaults("osmosis") == {}
        assert "not found" in caplog.text

    def test_malformed_file_is_empty(self, tmp_path):
        """Invalid YAML never raises."""
        path = tmp_path / "defaults.yaml"
        path.write_text("defaultChains: [unclosed\n")

        assert DefaultCatalogue.from_file(path).chain_names == []

    def test_non_mapping_file_is_empty(self, tmp_path):
        """A YAML list is not a catalogue."""
        path = tmp_path / "defaults.yaml"
        path.write_text("- a\n- b\n")

        assert DefaultCatalogue.from_file(path).relayer_types == []

    def test_lookups_return_copies(self, catalogue):
        """Mutating a lookup result does not affect the catalogue."""
        catalogue.chain_defaults("osmosis")["denom"] = "changed"
        assert catalogue.chain_defaults("osmosis")["denom"] == "uosmo"

    def test_unknown_key_is_empty(self, catalogue):
        """Unknown discriminants return an empty dict."""
        assert catalogue.chain_defaults("unknown") == {}
        assert catalogue.faucet_defaults("unknown") == {}


# =============================================================================
# ConfigResolver
# =============================================================================


class TestChainHostname:
    """Tests for hostname normalization."""

    def test_underscores_replaced(self):
        """Underscores are not valid in DNS labels."""
        assert chain_hostname("osmosis_1") == "osmosis-1"

    def test_truncated_to_dns_limit(self):
        """Hostnames are at most 63 characters."""
        assert len(chain_hostname("a" * 100)) == 63


class TestConfigResolverChains:
    """Tests for chain resolution."""

    def test_catalogue_fills_missing_fields(self, resolver):
        """Fields the user omits come from the catalogue entry."""
        resolved = resolver.resolve_chain(ChainSpec(id="osmosis-1", name="osmosis"))

        assert resolved.denom == "uosmo"
        assert resolved.binary == "osmosisd"
        assert resolved.image == "ghcr.io/cosmology-tech/starship/osmosis:v25.0.0"
        assert resolved.hostname == "osmosis-1"
        assert resolved.num_validators == 1

    def test_user_fields_win(self, resolver):
        """Explicit user fields override the catalogue."""
        resolved = resolver.resolve_chain(
            ChainSpec(id="osmosis-1", name="osmosis", denom="uion", image="custom:latest")
        )

        assert resolved.denom == "uion"
        assert resolved.image == "custom:latest"

    def test_nested_ports_merge(self, resolver):
        """A partial ports block keeps the catalogue's other ports."""
        resolved = resolver.resolve_chain(
            ChainSpec.model_validate({"id": "osmosis-1", "name": "osmosis", "ports": {"rpc": 26658}})
        )

        assert resolved.ports.rpc == 26658
        assert resolved.ports.rest == 1317

    def test_user_list_replaces_catalogue_list(self, resolver):
        """Asset lists from the user replace the catalogue's."""
        resolved = resolver.resolve_chain(
            ChainSpec(id="osmosis-1", name="osmosis", assets=[{"base": "uion"}])
        )

        assert resolved.assets == [{"base": "uion"}]

    def test_faucet_defaults(self, resolver):
        """Faucets default to an enabled starship faucet."""
        resolved = resolver.resolve_chain(ChainSpec(id="osmosis-1", name="osmosis"))

        assert resolved.faucet_enabled
        assert resolved.faucet.type == "starship"
        assert resolved.faucet.concurrency == 5

    def test_faucet_type_selects_defaults(self, resolver):
        """The faucet type picks its own catalogue entry."""
        resolved = resolver.resolve_chain(
            ChainSpec.model_validate({"id": "osmosis-1", "name": "osmosis", "faucet": {"type": "cosmjs"}})
        )

        assert resolved.faucet.type == "cosmjs"
        assert resolved.faucet.concurrency == 3
        assert "cosmjs-faucet" in resolved.faucet.image

    def test_catalogue_can_disable_faucet(self, resolver):
        """A chain family's entry can turn the faucet off."""
        resolved = resolver.resolve_chain(ChainSpec(id="1337", name="ethereum"))
        assert not resolved.faucet_enabled

    def test_cometmock_defaults(self, resolver):
        """Cometmock is disabled but carries the catalogue image."""
        resolved = resolver.resolve_chain(ChainSpec(id="osmosis-1", name="osmosis"))

        assert not resolved.cometmock_enabled
        assert resolved.cometmock.image == "ghcr.io/informalsystems/cometmock:v0.37.x"

    def test_default_scripts_merged_with_chain_scripts(self, resolver):
        """Chain scripts override the shared defaults by key."""
        resolved = resolver.resolve_chain(
            ChainSpec.model_validate(
                {
                    "id": "osmosis-1",
                    "name": "osmosis",
                    "scripts": {"createGenesis": {"name": "custom.sh", "data": "echo custom"}},
                }
            )
        )

        assert resolved.scripts["createGenesis"].data == "echo custom"
        assert resolved.scripts["updateConfig"].file == "scripts/default/update-config.sh"

    def test_build_enabled_uses_runner_image(self, resolver):
        """Chains built from source run on the runner image."""
        resolved = resolver.resolve_chain(
            ChainSpec.model_validate(
                {"id": "osmosis-1", "name": "osmosis", "build": {"enabled": True, "source": "v25.0.0"}}
            )
        )

        assert resolved.to_build
        assert resolved.image == RUNNER_IMAGE

    def test_upgrade_enabled_sets_to_build(self, resolver):
        """Upgrades also require the build step."""
        resolved = resolver.resolve_chain(
            ChainSpec.model_validate(
                {
                    "id": "osmosis-1",
                    "name": "osmosis",
                    "upgrade": {
                        "enabled": True,
                        "type": "build",
                        "genesis": "v24.0.0",
                        "upgrades": [{"name": "v25", "version": "v25.0.0"}],
                    },
                }
            )
        )

        assert resolved.to_build
        assert not resolved.build.enabled

    def test_unknown_chain_resolves(self, resolver):
        """Chains without a catalogue entry still resolve."""
        resolved = resolver.resolve_chain(ChainSpec(id="custom-1", name="custom", image="custom:1"))

        assert resolved.hostname == "custom-1"
        assert resolved.image == "custom:1"
        assert resolved.denom is None

    def test_empty_catalogue_is_identity(self):
        """With no catalogue only the built-in sub-object defaults apply."""
        resolved = ConfigResolver().resolve_chain(ChainSpec(id="osmosis-1", name="osmosis"))

        assert resolved.image is None
        assert resolved.faucet_enabled
        assert resolved.scripts == {}

    def test_resolution_is_deterministic(self, resolver):
        """Two resolutions of one spec are identical."""
        spec = ChainSpec.model_validate(
            {"id": "osmosis-1", "name": "osmosis", "numValidators": 3, "faucet": {"type": "cosmjs"}}
        )
        first = resolver.resolve_chain(spec)
        second = resolver.resolve_chain(spec)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_numeric_id_coerced(self, resolver):
        """EVM-style numeric ids become strings."""
        resolved = resolver.resolve_chain(ChainSpec.model_validate({"id": 1337, "name": "ethereum"}))
        assert resolved.id == "1337"


class TestConfigResolverRelayers:
    """Tests for relayer resolution."""

    def test_catalogue_config_beneath_user_config(self, resolver):
        """User relayer config merges over the type's defaults."""
        resolved = resolver.resolve_relayer(
            RelayerSpec(
                name="osmos-cosmos",
                type="hermes",
                chains=["osmosis-1", "cosmoshub-4"],
                config={"rest": {"port": 3100}},
            )
        )

        assert resolved.image.endswith("hermes:1.10.0")
        assert resolved.config["rest"] == {"enabled": True, "port": 3100}
        assert resolved.replicas == 1

    def test_unknown_type_resolves_without_defaults(self, resolver):
        """Resolution itself never rejects a relayer type."""
        resolved = resolver.resolve_relayer(
            RelayerSpec(name="x", type="custom", chains=["a", "b"])
        )

        assert resolved.image is None
        assert resolved.config == {}


# =============================================================================
# ScriptProvider
# =============================================================================


class TestScriptProvider:
    """Tests for script content loading."""

    def test_inline_data(self, tmp_path):
        """Inline data is returned as-is."""
        assert ScriptProvider(tmp_path).get_script_content(Script(data="echo hi")) == "echo hi"

    def test_relative_file(self, project_root):
        """Relative paths resolve against the project root."""
        content = ScriptProvider(project_root).get_script_content(
            {"file": "scripts/default/create-genesis.sh"}
        )
        assert "echo genesis" in content

    def test_data_wins_over_file(self, project_root):
        """A reference with both uses the inline data."""
        script = Script(data="inline", file="scripts/default/create-genesis.sh")
        assert ScriptProvider(project_root).get_script_content(script) == "inline"

    def test_missing_file_raises(self, tmp_path):
        """A missing file is a ScriptNotFoundError."""
        with pytest.raises(ScriptNotFoundError, match="Script not found"):
            ScriptProvider(tmp_path).get_script_content(Script(name="x.sh", file="missing.sh"))

    def test_empty_reference_raises(self, tmp_path):
        """A reference with neither data nor file is rejected."""
        with pytest.raises(ScriptNotFoundError, match="either file or data"):
            ScriptProvider(tmp_path).get_script_content(Script(name="x.sh"))

    def test_shared_scripts_sorted(self, project_root):
        """Shared scripts are keyed by file name in sorted order."""
        scripts = ScriptProvider(project_root).shared_scripts("scripts/default")
        assert list(scripts) == ["create-genesis.sh", "update-config.sh"]

    def test_shared_scripts_missing_directory(self, tmp_path):
        """A missing directory yields no scripts."""
        assert ScriptProvider(tmp_path).shared_scripts("scripts/default") == {}
