"""Integration tests for loading the tiers into a store."""

from subconfig import init
from subconfig.models.schemas import ApplyMode, ConfigSource, SubconfigSettings
from subconfig.provider import SubconfigProvider
from subconfig.resolver import RequestContext
from subconfig.store import ConfigStore


def make_provider(root, store=None, host="api.example.com", environment="prod"):
    return SubconfigProvider(
        store if store is not None else ConfigStore(),
        context=RequestContext(host),
        settings=SubconfigSettings(config_root=root),
        environment=environment,
    )


def contains_key(tree, key):
    if isinstance(tree, dict):
        return key in tree or any(contains_key(v, key) for v in tree.values())
    if isinstance(tree, list):
        return any(contains_key(v, key) for v in tree)
    return False


class TestSubconfigProvider:
    """Test cases for SubconfigProvider."""

    def test_full_pipeline(self, tiered_root):
        """Test the three tiers are applied in precedence order."""
        provider = make_provider(tiered_root)
        provider.register()

        assert provider.store.get("x") == 3
        assert provider.store.get("y") == 2
        assert provider.store.get("app.name") == "base"
        assert not provider.store.has("merge_config")

    def test_scenario_recorded(self, tiered_root):
        """Test the resolved subproject and scenario are kept."""
        provider = make_provider(tiered_root)
        provider.register()

        assert provider.subproject == "api"
        assert provider.loading_scenario == (
            ("env", "common"),
            ("env", "api", "common"),
            ("env", "api", "prod"),
        )
        assert [r.applied for r in provider.results] == [True, True, True]
        assert [r.mode for r in provider.results] == [ApplyMode.OVERWRITE] * 3

    def test_pipeline_from_preloaded_store(self):
        """Test tiers preloaded in the store are applied without files."""
        store = ConfigStore(
            {
                "env": {
                    "common": {"x": 1},
                    "api": {"common": {"y": 2}, "prod": {"x": 3, "merge_config": False}},
                }
            }
        )
        provider = make_provider("/nonexistent", store=store)
        provider.register()

        assert store.get("x") == 3
        assert store.get("y") == 2
        assert all(r.source == ConfigSource.STORE for r in provider.results)
        assert not store.has("merge_config")
        assert not store.has("env.api.prod.merge_config")

    def test_missing_tiers_skipped(self, config_root, write_tier):
        """Test absent tiers leave the store untouched."""
        write_tier(config_root, "env", "api", "common", data={"y": 2})
        store = ConfigStore({"keep": True})
        provider = make_provider(config_root, store=store)
        provider.register()

        assert store.all() == {"keep": True, "y": 2}
        assert [r.applied for r in provider.results] == [False, True, False]

    def test_merge_tier(self, config_root, write_tier):
        """Test a merge tier grows values set by earlier tiers."""
        write_tier(
            config_root,
            "env",
            "common",
            data={"path": "x", "view": {"paths": ["p1"]}},
        )
        write_tier(
            config_root,
            "env",
            "api",
            "prod",
            data={"merge_config": True, "path": "y", "view": {"paths": ["p2", "p3"]}},
        )
        provider = make_provider(config_root)
        provider.register()

        assert provider.store.get("path") == ["x", "y"]
        assert provider.store.get("view.paths") == ["p1", "p2", "p3"]
        assert not contains_key(provider.store.all(), "merge_config")
        assert provider.results[2].mode is ApplyMode.MERGE

    def test_later_tier_sees_earlier_mutation(self, config_root, write_tier):
        """Test a tier written into the store by an earlier tier is picked up."""
        write_tier(
            config_root,
            "env",
            "common",
            data={"env.api.common": {"from_common": True}},
        )
        write_tier(config_root, "env", "api", "common", data={"from_file": True})
        provider = make_provider(config_root)
        provider.register()

        assert provider.store.get("from_common") is True
        assert not provider.store.has("from_file")
        assert provider.results[1].source == ConfigSource.STORE

    def test_host_cannot_leave_config_root(self, tmp_path, config_root, write_tier):
        """Test a path-like host does not load files from outside the root."""
        outside = tmp_path / "outside"
        write_tier(outside, "common", data={"injected": True})
        write_tier(outside, "prod", data={"injected": True})
        write_tier(config_root, "env", "front", "prod", data={"site": "front"})

        provider = make_provider(config_root, host=f"{outside}.example.com")
        provider.register()

        assert provider.subproject == "front"
        assert not provider.store.has("injected")
        assert provider.store.get("site") == "front"

    def test_register_is_idempotent(self, tiered_root, write_tier):
        """Test a second register call does nothing."""
        provider = make_provider(tiered_root)
        provider.register()
        changes = len(provider.store.get_history())

        provider.register()

        assert len(provider.store.get_history()) == changes

    def test_command_line_subproject(self, config_root, write_tier):
        """Test command-line execution loads the cli tiers."""
        write_tier(config_root, "env", "cli", "common", data={"console": True})
        provider = SubconfigProvider(
            ConfigStore(),
            settings=SubconfigSettings(config_root=config_root),
            environment="prod",
        )
        provider.register()

        assert provider.subproject == "cli"
        assert provider.store.get("console") is True

    def test_default_subproject_without_host(self, config_root, write_tier):
        """Test requests without a host load the default subproject."""
        write_tier(config_root, "env", "front", "local", data={"site": "front"})
        provider = make_provider(config_root, host=None, environment="local")
        provider.register()

        assert provider.store.get("site") == "front"

    def test_environment_from_process(self, config_root, write_tier, monkeypatch):
        """Test the environment name is read from APP_ENV."""
        monkeypatch.setenv("APP_ENV", "Stage")
        write_tier(config_root, "env", "api", "stage", data={"stage": True})
        provider = make_provider(config_root, environment=None)
        provider.register()

        assert provider.environment == "stage"
        assert provider.store.get("stage") is True

    def test_default_environment(self, config_root):
        """Test production is used when APP_ENV is unset."""
        provider = make_provider(config_root, environment=None)
        assert provider.environment == "production"

    def test_tier_files(self, config_root):
        """Test each tier is reported with its backing file."""
        provider = make_provider(config_root)
        assert provider.tier_files() == [
            (("env", "common"), config_root / "env" / "common.yaml"),
            (("env", "api", "common"), config_root / "env" / "api" / "common.yaml"),
            (("env", "api", "prod"), config_root / "env" / "api" / "prod.yaml"),
        ]

    def test_json_tiers(self, config_root, write_tier):
        """Test another file extension can be configured."""
        write_tier(config_root, "env", "common", data={"x": 1}, ext="json")
        provider = SubconfigProvider(
            ConfigStore(),
            settings=SubconfigSettings(config_root=config_root, file_extension="json"),
            environment="prod",
        )
        provider.register()
        assert provider.store.get("x") == 1


class TestInit:
    """Test cases for the init entry point."""

    def test_init_returns_loaded_store(self, tiered_root):
        """Test init builds a store from the base tree and loads into it."""
        store = init(
            base={"app": {"debug": False}},
            config_root=tiered_root,
            context=RequestContext("api.example.com"),
            environment="prod",
        )
        assert store.get("x") == 3
        assert store.get("y") == 2
        assert store.get("app") == {"name": "base"}

    def test_init_with_existing_store(self, tiered_root):
        """Test init loads into a given store."""
        store = ConfigStore()
        result = init(
            store=store,
            settings=SubconfigSettings(config_root=tiered_root),
            context=RequestContext("api.example.com"),
            environment="prod",
        )
        assert result is store
        assert store.get("y") == 2

    def test_init_reads_settings_from_environment(self, tiered_root, monkeypatch):
        """Test settings come from SUBCONFIG_ variables by default."""
        monkeypatch.setenv("SUBCONFIG_CONFIG_ROOT", str(tiered_root))
        monkeypatch.setenv("APP_ENV", "prod")
        store = init(context=RequestContext("api.example.com"))
        assert store.get("x") == 3
