import json

import pytest

from github_discord_relay.errors import ConfigError
from github_discord_relay.utils.settings import load_settings, read_legacy_config

REQUIRED = ("REPO_ORG", "REPO_NAME", "DISCORD_WEBHOOK_ID", "DISCORD_WEBHOOK_TOKEN", "POLL_INTERVAL_MS")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in REQUIRED:
        monkeypatch.delenv(name, raising=False)


def test_derived_urls(settings):
    assert settings.repo_id == "Wikia/app"
    assert settings.feed_url == "https://api.github.com/repos/Wikia/app/events"
    assert settings.webhook_url == "https://discordapp.com/api/webhooks/123/secret"
    assert settings.interval_seconds == 60.0


def test_legacy_config_file_maps_to_settings(tmp_path):
    path = tmp_path / "github-config.json"
    path.write_text(json.dumps({
        "interval": 30000,
        "repo": {"org": "Wikia", "repo": "app"},
        "webhook": {"id": 4242, "token": "tok"},
    }), encoding="utf-8")

    settings = load_settings(config_path=path, env_file=None)

    assert settings.POLL_INTERVAL_MS == 30000
    assert settings.repo_id == "Wikia/app"
    assert settings.DISCORD_WEBHOOK_ID == "4242"
    assert settings.webhook_url.endswith("/4242/tok")


def test_env_file_is_read(tmp_path):
    env = tmp_path / ".env"
    env.write_text(
        "REPO_ORG=octo\nREPO_NAME=cat\nDISCORD_WEBHOOK_ID=1\nDISCORD_WEBHOOK_TOKEN=t\n",
        encoding="utf-8",
    )
    settings = load_settings(env_file=env)
    assert settings.repo_id == "octo/cat"


def test_missing_required_values_raise_config_error():
    with pytest.raises(ConfigError):
        load_settings(env_file=None)


def test_non_positive_interval_is_rejected():
    with pytest.raises(ConfigError):
        load_settings(
            env_file=None,
            REPO_ORG="o", REPO_NAME="r", DISCORD_WEBHOOK_ID="1", DISCORD_WEBHOOK_TOKEN="t",
            POLL_INTERVAL_MS=0,
        )


@pytest.mark.parametrize("content", ["not json", "[1]"])
def test_bad_legacy_config_raises_config_error(tmp_path, content):
    path = tmp_path / "github-config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        read_legacy_config(path)


def test_missing_legacy_config_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        read_legacy_config(tmp_path / "absent.json")
