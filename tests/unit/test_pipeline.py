"""Tests for the migration pipeline."""

import json

import pytest

from edgeport.core.errors import UnknownEnvironmentError
from edgeport.core.ir import (
    ResourceBinding,
    ResourceType,
    RouteSpec,
    SecretBinding,
    TextBinding,
)
from edgeport.migrate import MigrationOptions, run_pipeline
from edgeport.migrate.pipeline import DEFAULT_ENTRYPOINT, transform_routes, unit_display_name


class TestEndToEnd:
    """Tests for complete pipeline runs."""

    @pytest.mark.parametrize("adopt", [True, False])
    def test_shop_scenario(self, shop_config, adopt):
        options = MigrationOptions(app_name="shop", stage="prod", preserve_names=False, adopt=adopt)

        model = run_pipeline([shop_config], options)

        resources = list(model.registry.entries())
        assert len(resources) == 1
        sessions = resources[0]
        assert sessions.key == "namespace-store:sessions"
        assert sessions.display_name == "shop-sessions-prod"
        assert sessions.variable_name == "sessions"
        assert sessions.adopt_existing is adopt

        unit = model.units[0]
        assert unit.bindings == {
            "SESSIONS": ResourceBinding(key="namespace-store:sessions"),
            "DEBUG": TextBinding(value="true"),
            "AUTH_TOKEN": SecretBinding(env_var_name="AUTH_TOKEN"),
        }
        assert set(unit.secret_names) == {"AUTH_TOKEN"}
        assert model.errors == []
        assert model.warnings == []
        assert model.success is True

    def test_cross_unit_sharing(self, make_config):
        web = make_config(name="web", d1_databases=[{"binding": "DB", "database_name": "main"}])
        jobs = make_config(name="jobs", d1_databases=[{"binding": "DB", "database_name": "main"}])

        model = run_pipeline([web, jobs])

        assert model.registry.keys() == ["relational-db:db"]
        assert model.units[0].bindings["DB"] == ResourceBinding(key="relational-db:db")
        assert model.units[1].bindings["DB"] == ResourceBinding(key="relational-db:db")
        assert model.success is True

    def test_registry_dedup_keeps_first_unit_properties(self, make_config):
        first = make_config(name="web", kv_namespaces=[{"binding": "CACHE", "id": "web-cache"}])
        second = make_config(name="jobs", kv_namespaces=[{"binding": "CACHE", "id": "jobs-cache"}])

        model = run_pipeline([first, second])

        entries = list(model.registry.entries())
        assert len(entries) == 1
        assert entries[0].properties == {"namespace_id": "web-cache"}

    def test_deterministic_ordering(self, make_config):
        def build():
            return [
                make_config(
                    name="web",
                    vars={"Z": "1", "A": "2", "API_KEY": "k"},
                    r2_buckets=[{"binding": "ASSETS", "bucket_name": "assets"}],
                    kv_namespaces=[{"binding": "CACHE", "id": "1"}, {"binding": "FLAGS", "id": "2"}],
                ),
                make_config(
                    name="jobs",
                    queues={"consumers": [{"queue": "events"}]},
                    kv_namespaces=[{"binding": "FLAGS", "id": "2"}],
                ),
            ]

        first = run_pipeline(build())
        second = run_pipeline(build())

        assert first.registry.keys() == second.registry.keys()
        assert [list(u.bindings) for u in first.units] == [list(u.bindings) for u in second.units]
        assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())

    def test_runs_do_not_share_state(self, make_config):
        config = make_config(kv_namespaces=[{"binding": "CACHE", "id": "1"}])

        run_pipeline([config])
        model = run_pipeline([config])

        assert len(model.registry) == 1
        assert model.resources[0].variable_name == "cache"

    def test_duplicate_binding_reported_as_error(self, make_config):
        config = make_config(
            kv_namespaces=[{"binding": "STORE", "id": "1"}],
            vars={"STORE": "x"},
        )

        model = run_pipeline([config])

        assert model.success is False
        assert model.errors == [
            "Duplicate binding name 'STORE' in worker 'api' (declared as namespace-store, var)"
        ]
        assert model.units[0].bindings["STORE"] == ResourceBinding(key="namespace-store:store")

    def test_partial_failure_still_produces_model(self, make_config):
        config = make_config(
            d1_databases=[{"binding": "BROKEN"}],
            kv_namespaces=[{"binding": "CACHE", "id": "1"}],
        )

        model = run_pipeline([config])

        assert model.success is True
        assert model.registry.keys() == ["namespace-store:cache"]
        assert len(model.warnings) == 1
        assert "missing required field 'database_name'" in model.warnings[0]


class TestEnvironments:
    """Tests for target environment handling."""

    def test_target_environment_applied(self, make_config):
        config = make_config(
            vars={"MODE": "dev", "LOG": "info"},
            env={
                "production": {
                    "vars": {"MODE": "prod"},
                    "kv_namespaces": [{"binding": "CACHE", "id": "prod-cache"}],
                }
            },
        )

        model = run_pipeline([config], MigrationOptions(target_environment="production"))

        unit = model.units[0]
        assert unit.source_environment == "production"
        assert unit.bindings["MODE"] == TextBinding(value="prod")
        assert unit.bindings["LOG"] == TextBinding(value="info")
        assert model.resources[0].source_environment == "production"

    def test_unknown_environment_raises(self, make_config):
        config = make_config(env={"staging": {}})

        with pytest.raises(UnknownEnvironmentError):
            run_pipeline([config], MigrationOptions(target_environment="production"))

    def test_worker_without_environments_uses_base(self, make_config):
        web = make_config(
            name="web",
            vars={"MODE": "dev"},
            env={"production": {"vars": {"MODE": "prod"}}},
        )
        jobs = make_config(name="jobs", kv_namespaces=[{"binding": "CACHE", "id": "jobs-cache"}])

        model = run_pipeline([web, jobs], MigrationOptions(target_environment="production"))

        assert model.success is True
        assert model.get_unit("web").bindings["MODE"] == TextBinding(value="prod")
        jobs_unit = model.get_unit("jobs")
        assert jobs_unit.source_environment is None
        assert jobs_unit.bindings["CACHE"] == ResourceBinding(key="namespace-store:cache")
        assert model.registry.keys() == ["namespace-store:cache"]


class TestDeployableUnit:
    """Tests for worker assembly."""

    def test_worker_settings(self, make_config):
        config = make_config(
            name="edge-api",
            main="src/worker.ts",
            compatibility_date="2024-09-23",
            compatibility_flags=["nodejs_compat"],
            triggers={"crons": ["0 * * * *"]},
            observability={"enabled": True},
            placement={"mode": "smart"},
            usage_model="unbound",
            logpush=True,
        )

        unit = run_pipeline([config]).units[0]

        assert unit.unit_id == "edge-api"
        assert unit.variable_name == "edge_api"
        assert unit.entrypoint == "src/worker.ts"
        assert unit.compatibility.date == "2024-09-23"
        assert unit.compatibility.flags == ["nodejs_compat"]
        assert unit.crons == ["0 * * * *"]
        assert unit.observability == {"enabled": True}
        assert unit.placement == "smart"
        assert unit.usage_model == "unbound"
        assert unit.logpush is True

    def test_default_entrypoint(self, make_config):
        assert run_pipeline([make_config()]).units[0].entrypoint == DEFAULT_ENTRYPOINT

    def test_routes(self, make_config):
        config = make_config(
            routes=["api.example.com/*", {"pattern": "shop.example.com", "custom_domain": True}],
            route="legacy.example.com/*",
        )

        routes = transform_routes(config)

        assert routes == [
            RouteSpec(pattern="api.example.com/*"),
            RouteSpec(pattern="shop.example.com", custom_domain=True),
            RouteSpec(pattern="legacy.example.com/*"),
        ]
        assert run_pipeline([config]).units[0].custom_domains == ["shop.example.com"]

    def test_unit_display_name(self, make_config):
        config = make_config(name="api")

        assert unit_display_name(config, "shop", MigrationOptions()) == "api"
        assert (
            unit_display_name(config, "shop", MigrationOptions(preserve_names=False, stage="prod"))
            == "shop-api-prod"
        )
        assert unit_display_name(config, "api", MigrationOptions(preserve_names=False)) == "api"

    def test_queue_consumer_and_resource_keys(self, make_config):
        config = make_config(
            name="mailer",
            queues={"consumers": [{"queue": "outbox", "max_batch_timeout": 2}]},
        )

        unit = run_pipeline([config]).units[0]

        assert unit.consumers[0].queue_key == "queue:outbox"
        assert unit.consumers[0].settings.max_wait_time_ms == 2000
        assert unit.resource_keys == ["queue:outbox"]


class TestResolvedModel:
    """Tests for ResolvedModel helpers."""

    def test_app_name_defaults_to_first_unit(self, make_config):
        model = run_pipeline([make_config(name="billing"), make_config(name="billing-jobs")])

        assert model.app_name == "billing"

    def test_secret_names_union(self, make_config):
        model = run_pipeline(
            [
                make_config(name="web", vars={"API_KEY": "a", "SESSION_SECRET": "b"}),
                make_config(name="jobs", vars={"API_KEY": "a", "DB_PASSWORD": "c"}),
            ]
        )

        assert model.secret_names == ["API_KEY", "SESSION_SECRET", "DB_PASSWORD"]

    def test_summary(self, make_config):
        config = make_config(
            kv_namespaces=[{"binding": "A", "id": "1"}, {"binding": "B", "id": "2"}],
            ai={"binding": "AI"},
            vars={"TOKEN": "x"},
        )

        summary = run_pipeline([config]).summary()

        assert summary["workers"] == 1
        assert summary["resources"] == 3
        assert summary["resources_by_type"] == {
            ResourceType.NAMESPACE_STORE.value: 2,
            ResourceType.AI_MODEL_ENDPOINT.value: 1,
        }
        assert summary["secrets"] == 1
        assert summary["success"] is True

    def test_to_dict_is_json_ready(self, shop_config):
        data = run_pipeline([shop_config]).to_dict()

        encoded = json.loads(json.dumps(data))
        assert encoded["resources"][0]["key"] == "namespace-store:sessions"
        assert encoded["resources"][0]["resource_type"] == "namespace-store"
        assert encoded["workers"][0]["bindings"]["AUTH_TOKEN"] == {
            "kind": "secret",
            "env_var_name": "AUTH_TOKEN",
        }
        assert encoded["secrets"] == ["AUTH_TOKEN"]

    def test_get_unit(self, make_config):
        model = run_pipeline([make_config(name="web")])

        assert model.get_unit("web") is model.units[0]
        assert model.get_unit("missing") is None


class TestDeadLetterQueues:
    """Tests for dead letter queues declared by other workers."""

    def test_queue_produced_by_later_worker(self, make_config):
        consumer = make_config(
            name="a", queues={"consumers": [{"queue": "jobs", "dead_letter_queue": "dead"}]}
        )
        producer = make_config(name="b", queues={"producers": [{"binding": "DLQ", "queue": "dead"}]})

        model = run_pipeline([consumer, producer])

        assert model.registry.keys() == ["queue:jobs", "queue:dlq"]
        settings = model.get_unit("a").consumers[0].settings
        assert settings.dead_letter_queue == "queue:dlq"
        assert model.warnings == []

    def test_missing_dead_letter_queue_still_warned(self, make_config):
        consumer = make_config(
            name="a", queues={"consumers": [{"queue": "jobs", "dead_letter_queue": "dead"}]}
        )

        model = run_pipeline([consumer])

        assert model.get_unit("a").consumers[0].settings.dead_letter_queue == "queue:dead"
        assert len(model.warnings) == 1
        assert "dead letter queue 'dead'" in model.warnings[0]
