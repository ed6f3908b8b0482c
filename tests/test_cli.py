"""Tests for the GuildEvents CLI."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from conftest import ACCESS_KEY, FIXED_AMZ_DATE, REGION, SECRET_KEY
from guildevents.bucket.results import Resource
from guildevents.bucket.sync import SyncOutcome, SyncStatus
from guildevents.cli import cli

STAMP = datetime(2020, 2, 21, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Bucket settings in the environment."""
    monkeypatch.setenv("GUILDEVENTS_BUCKET_REGION", REGION)
    monkeypatch.setenv("GUILDEVENTS_BUCKET_BASE_URL", "https://examplebucket.s3.amazonaws.com/")
    monkeypatch.setenv("GUILDEVENTS_ACCESS_KEY", ACCESS_KEY)
    monkeypatch.setenv("GUILDEVENTS_SECRET_KEY", SECRET_KEY)
    monkeypatch.setenv("GUILDEVENTS_CACHE_SQLITE_PATH", str(tmp_path / "resources.sqlite"))


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _blocking_client(**results) -> MagicMock:
    client = MagicMock()
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    for name, value in results.items():
        getattr(client, name).return_value = value
    return client


class TestSignCommand:
    """Tests for the sign command."""

    def test_prints_signature_steps(self, env, runner):
        """Canonical request and header are shown for a fixed timestamp."""
        result = runner.invoke(cli, ["sign", "get", "events.json", "--timestamp", FIXED_AMZ_DATE])

        assert result.exit_code == 0, result.output
        assert "x-amz-date:20200221T120000Z" in result.output
        assert "ec57e7ad1c97543021f9fa217380503a292f49770effca4967fbb657be474ee0" in result.output

    def test_bad_timestamp(self, env, runner):
        result = runner.invoke(cli, ["sign", "GET", "events.json", "--timestamp", "yesterday"])
        assert result.exit_code == 1

    def test_missing_credentials(self, monkeypatch, runner):
        """Missing settings exit non-zero before any request."""
        for name in ("ACCESS_KEY", "SECRET_KEY", "BUCKET_REGION", "BUCKET_BASE_URL"):
            monkeypatch.delenv(f"GUILDEVENTS_{name}", raising=False)

        result = runner.invoke(cli, ["sign", "GET", "events.json"])

        assert result.exit_code == 1


class TestFetchCommands:
    """Tests for fetch and last-modified."""

    def test_fetch_prints_body(self, env, runner):
        client = _blocking_client(fetch_object='{"events":[]}')
        with patch("guildevents.cli.BlockingBucketClient", return_value=client):
            result = runner.invoke(cli, ["fetch", "events"])

        assert result.exit_code == 0
        assert result.output.strip() == '{"events":[]}'
        client.fetch_object.assert_called_once_with("events.json")

    def test_fetch_absent(self, env, runner):
        client = _blocking_client(fetch_object=None)
        with patch("guildevents.cli.BlockingBucketClient", return_value=client):
            result = runner.invoke(cli, ["fetch", "organisations"])

        assert result.exit_code == 1

    def test_last_modified(self, env, runner):
        client = _blocking_client(fetch_last_modified=STAMP)
        with patch("guildevents.cli.BlockingBucketClient", return_value=client):
            result = runner.invoke(cli, ["last-modified", "events"])

        assert result.exit_code == 0
        assert result.output.strip() == "2020-02-21T12:00:00+00:00"


class TestSyncCommand:
    """Tests for the sync command."""

    def _patch_sync(self, outcomes):
        synchronizer = MagicMock()
        synchronizer.refresh_all = AsyncMock(return_value=outcomes)
        return patch("guildevents.cli.ResourceSynchronizer", return_value=synchronizer)

    def test_all_updated(self, env, runner):
        outcomes = [
            SyncOutcome(Resource.EVENTS, SyncStatus.UPDATED, STAMP, "{}"),
            SyncOutcome(Resource.ORGANISATIONS, SyncStatus.UNCHANGED, STAMP),
        ]
        with self._patch_sync(outcomes) as synchronizer_cls:
            result = runner.invoke(cli, ["sync"])

        assert result.exit_code == 0, result.output
        assert "updated" in result.output
        assert "unchanged" in result.output
        refresh_all = synchronizer_cls.return_value.refresh_all
        assert refresh_all.await_args.args[0] == [Resource.EVENTS, Resource.ORGANISATIONS]

    def test_skipped_exits_non_zero(self, env, runner):
        outcomes = [SyncOutcome(Resource.EVENTS, SyncStatus.SKIPPED)]
        with self._patch_sync(outcomes) as synchronizer_cls:
            result = runner.invoke(cli, ["sync", "events", "--force"])

        assert result.exit_code == 1
        refresh_all = synchronizer_cls.return_value.refresh_all
        assert refresh_all.await_args.args[0] == [Resource.EVENTS]
        assert refresh_all.await_args.kwargs == {"force": True}
