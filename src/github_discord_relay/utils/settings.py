from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from github_discord_relay.errors import ConfigError

DEFAULT_USER_AGENT = "khatch (0.0.1) http://dabpenguin.com"
DEFAULT_TEMPLATE = '{user} {verb} "{title}" - <{link}>'


class Settings(BaseSettings):
    # GitHub feed
    REPO_ORG: str
    REPO_NAME: str
    GITHUB_API_BASE: str = "https://api.github.com"
    GITHUB_TOKEN: str | None = None
    USER_AGENT: str = DEFAULT_USER_AGENT

    # Discord webhook
    DISCORD_WEBHOOK_ID: str
    DISCORD_WEBHOOK_TOKEN: str
    DISCORD_WEBHOOK_BASE: str = "https://discordapp.com/api/webhooks"
    MESSAGE_TEMPLATE: str = DEFAULT_TEMPLATE
    DELIVERY_MAX_ATTEMPTS: int = 3

    # Runtime
    POLL_INTERVAL_MS: int = 60_000
    HTTP_TIMEOUT: float = 30.0
    CURSOR_PATH: Path = Path("data/github-cache.json")
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("POLL_INTERVAL_MS", "DELIVERY_MAX_ATTEMPTS")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("HTTP_TIMEOUT")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @property
    def repo_id(self) -> str:
        return f"{self.REPO_ORG}/{self.REPO_NAME}"

    @property
    def feed_url(self) -> str:
        return f"{self.GITHUB_API_BASE.rstrip('/')}/repos/{self.repo_id}/events"

    @property
    def webhook_url(self) -> str:
        base = self.DISCORD_WEBHOOK_BASE.rstrip("/")
        return f"{base}/{self.DISCORD_WEBHOOK_ID}/{self.DISCORD_WEBHOOK_TOKEN}"

    @property
    def interval_seconds(self) -> float:
        return self.POLL_INTERVAL_MS / 1000


def read_legacy_config(path: Path) -> dict[str, Any]:
    """
    Map the JSON config layout used by the old node service onto settings
    fields:

        {"interval": 60000,
         "repo":    {"org": "Wikia", "repo": "app"},
         "webhook": {"id": "...", "token": "..."}}
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    out: dict[str, Any] = {}
    if "interval" in raw:
        out["POLL_INTERVAL_MS"] = raw["interval"]
    repo = raw.get("repo") or {}
    if "org" in repo:
        out["REPO_ORG"] = repo["org"]
    if "repo" in repo:
        out["REPO_NAME"] = repo["repo"]
    webhook = raw.get("webhook") or {}
    if "id" in webhook:
        out["DISCORD_WEBHOOK_ID"] = str(webhook["id"])
    if "token" in webhook:
        out["DISCORD_WEBHOOK_TOKEN"] = webhook["token"]
    return out


def load_settings(
    config_path: Path | None = None,
    env_file: Path | str | None = ".env",
    **overrides: Any,
) -> Settings:
    """Build settings from env/.env, then the legacy JSON file, then overrides."""
    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(read_legacy_config(Path(config_path)))
    values.update(overrides)
    try:
        return Settings(_env_file=env_file, **values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
