"""Tests for cross-reference validation."""

from edgeport.core.ir import (
    BindingDeclaration,
    DeployableUnit,
    QueueConsumerSettings,
    QueueConsumerSpec,
    ResourceBinding,
)
from edgeport.migrate import ValidationReport, normalize_resources, validate_model


def _unit(unit_id: str = "api", **fields) -> DeployableUnit:
    return DeployableUnit(
        unit_id=unit_id,
        display_name=unit_id,
        variable_name=unit_id,
        entrypoint="src/index.js",
        **fields,
    )


class TestValidationReport:
    """Tests for ValidationReport."""

    def test_success_without_errors(self):
        report = ValidationReport()
        report.add_warning("heads up")

        assert report.success is True

    def test_errors_fail(self):
        report = ValidationReport()
        report.add_error("broken")

        assert report.success is False


class TestDuplicateBindings:
    """Tests for binding name uniqueness."""

    def test_duplicate_name_is_error(self, registry):
        unit = _unit(
            declared_bindings=[
                BindingDeclaration(name="STORE", category="namespace-store"),
                BindingDeclaration(name="STORE", category="var"),
            ]
        )

        report = validate_model(registry, [unit])

        assert report.errors == [
            "Duplicate binding name 'STORE' in worker 'api' (declared as namespace-store, var)"
        ]

    def test_same_name_in_different_units_allowed(self, registry):
        units = [
            _unit("web", declared_bindings=[BindingDeclaration(name="A", category="var")]),
            _unit("jobs", declared_bindings=[BindingDeclaration(name="A", category="var")]),
        ]

        assert validate_model(registry, units).errors == []

    def test_duplicate_unit_ids(self, registry):
        report = validate_model(registry, [_unit("api"), _unit("api")])

        assert report.errors == ["Duplicate worker 'api': worker names must be unique"]


class TestDanglingReferences:
    """Tests for unregistered resource references."""

    def test_unregistered_binding_is_warning(self, registry):
        unit = _unit(bindings={"CACHE": ResourceBinding(key="namespace-store:cache")})

        report = validate_model(registry, [unit])

        assert report.success is True
        assert report.warnings == [
            "Binding 'CACHE' in worker 'api' refers to an unregistered resource "
            "'namespace-store:cache'"
        ]

    def test_dropped_declaration_is_warning(self, registry):
        unit = _unit(
            declared_bindings=[
                BindingDeclaration(name="CACHE", category="namespace-store", key="namespace-store:cache")
            ]
        )

        report = validate_model(registry, [unit])

        assert len(report.warnings) == 1
        assert "the KV namespace binding was not migrated" in report.warnings[0]

    def test_skipped_declaration_not_reported_again(self, registry):
        unit = _unit(declared_bindings=[BindingDeclaration(name="DB", category="relational-db")])

        assert validate_model(registry, [unit]).warnings == []

    def test_unregistered_dead_letter_queue(self, registry):
        consumer = QueueConsumerSpec(
            queue_key="queue:jobs",
            queue_name="jobs",
            settings=QueueConsumerSettings(dead_letter_queue="queue:jobs_dlq"),
            dead_letter_queue_name="jobs-dlq",
        )

        report = validate_model(registry, [_unit(consumers=[consumer])])

        assert report.success is True
        assert len(report.warnings) == 2
        assert "unregistered queue 'jobs'" in report.warnings[0]
        assert "dead letter queue 'jobs-dlq'" in report.warnings[1]

    def test_dead_letter_queue_found_by_queue_name(self, make_config, registry, options):
        normalize_resources(
            make_config(name="b", queues={"producers": [{"binding": "DLQ", "queue": "dead"}]}),
            registry,
            options,
        )
        consumer = QueueConsumerSpec(
            queue_key="queue:dlq",
            queue_name="dead",
            settings=QueueConsumerSettings(dead_letter_queue="queue:dead"),
            dead_letter_queue_name="dead",
        )

        assert validate_model(registry, [_unit("a", consumers=[consumer])]).warnings == []


class TestPhysicalNames:
    """Tests for the shared physical name check."""

    def test_shared_physical_name_warned(self, make_config, registry, options):
        config = make_config(
            r2_buckets=[
                {"binding": "UPLOADS", "bucket_name": "media"},
                {"binding": "IMAGES", "bucket_name": "media"},
            ]
        )
        normalize_resources(config, registry, options)

        report = validate_model(registry, [])

        assert report.warnings == [
            "Resources 'object-store:uploads' and 'object-store:images' share the physical name 'media'"
        ]

    def test_services_may_share_a_worker(self, make_config, registry, options):
        config = make_config(
            services=[
                {"binding": "AUTH", "service": "auth-worker"},
                {"binding": "AUTH_ADMIN", "service": "auth-worker", "entrypoint": "Admin"},
            ]
        )
        normalize_resources(config, registry, options)

        assert validate_model(registry, []).warnings == []
