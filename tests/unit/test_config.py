"""Unit tests for Settings and the dependency factories."""

import pytest

from vinreport.api import dependencies
from vinreport.config import Settings, get_settings
from vinreport.services.artifact_provider import (
    Base64PdfArtifactProvider,
    CachingArtifactProvider,
    DirectLinkArtifactProvider,
)
from vinreport.services.artifact_store import FilesystemArtifactStore
from vinreport.services.fulfillment import DynamoDBFulfillmentJobStore, InMemoryFulfillmentJobStore


class TestSettings:
    @pytest.mark.parametrize(
        "raw",
        ['["https://a.test", "https://b.test"]', "https://a.test, https://b.test"],
    )
    def test_cors_origins_json_or_csv(self, monkeypatch, raw):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", raw)
        assert Settings().cors_allow_origins == ["https://a.test", "https://b.test"]

    def test_table_prefix_defaults_to_environment(self, monkeypatch):
        monkeypatch.delenv("DYNAMODB_TABLE_PREFIX", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "prod")
        assert Settings().table_prefix == "vinreport-prod"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestDependencyFactories:
    def test_defaults(self):
        assert dependencies.get_artifact_store() is None
        assert isinstance(dependencies.get_artifact_provider(), Base64PdfArtifactProvider)
        assert isinstance(dependencies.get_job_store(), InMemoryFulfillmentJobStore)
        assert dependencies.get_webhook_handler() is dependencies.get_webhook_handler()

    def test_filesystem_cache_with_direct_links(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ARTIFACT_STORE", "filesystem")
        monkeypatch.setenv("ARTIFACT_DIR", str(tmp_path))
        monkeypatch.setenv("ARTIFACT_STRATEGY", "direct_link")
        dependencies.reset_services()

        provider = dependencies.get_artifact_provider()

        assert isinstance(dependencies.get_artifact_store(), FilesystemArtifactStore)
        assert isinstance(provider, CachingArtifactProvider)
        assert isinstance(provider._inner, DirectLinkArtifactProvider)

    def test_poll_settings_reach_poller(self, monkeypatch):
        monkeypatch.setenv("POLL_MAX_ATTEMPTS", "7")
        dependencies.reset_services()

        assert dependencies.get_report_poller().max_attempts == 7

    def test_dynamodb_job_store(self, monkeypatch):
        monkeypatch.setenv("JOB_STORE", "dynamodb")
        dependencies.reset_services()

        store = dependencies.get_job_store()

        assert isinstance(store, DynamoDBFulfillmentJobStore)
        assert store._db.name_prefix == "test-vinreport"

    def test_supabase_requires_credentials(self, monkeypatch):
        monkeypatch.setenv("ARTIFACT_STORE", "supabase")
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        dependencies.reset_services()

        with pytest.raises(RuntimeError, match="SUPABASE_URL"):
            dependencies.get_artifact_store()
