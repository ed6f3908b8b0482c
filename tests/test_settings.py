"""Tests for settings."""

import pytest

from guildevents.common.errors import BucketConfigError
from guildevents.common.settings import Settings


class TestSettings:
    """Tests for bucket settings."""

    def test_host_derived_from_base_url(self, settings):
        assert settings.effective_bucket_host == "examplebucket.s3.amazonaws.com"

    def test_explicit_host_wins(self, settings):
        settings = settings.model_copy(update={"bucket_host": "cdn.example.org"})
        assert settings.effective_bucket_host == "cdn.example.org"

    def test_complete_settings_pass(self, settings):
        settings.require_credentials()

    def test_missing_settings_named(self):
        settings = Settings(bucket_region="", bucket_base_url="", access_key=None, secret_key=None)

        with pytest.raises(BucketConfigError) as exc_info:
            settings.require_credentials()

        assert exc_info.value.missing == [
            "bucket_region",
            "bucket_base_url",
            "bucket_host",
            "access_key",
            "secret_key",
        ]

    def test_environment(self, monkeypatch):
        """Settings read GUILDEVENTS_* variables."""
        monkeypatch.setenv("GUILDEVENTS_BUCKET_REGION", "eu-west-1")
        monkeypatch.setenv("GUILDEVENTS_SECRET_KEY", "s3cr3t")

        settings = Settings()

        assert settings.bucket_region == "eu-west-1"
        assert settings.secret_key == "s3cr3t"
        assert "s3cr3t" not in repr(settings)
