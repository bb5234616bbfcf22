from typing import Any, Dict, List, Optional

import pytest
import requests

from github_discord_relay.utils.settings import Settings


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""
        self.headers = headers or {}

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Stands in for requests.Session; replies are consumed in order."""

    def __init__(self, replies: Optional[List[Any]] = None):
        self.replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        reply = self.replies.pop(0) if self.replies else FakeResponse(204)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, **kwargs)


def pr_event(event_id: int, updated_at: str, action: str = "opened", title: str = "Fix",
             user: str = "a", url: str = "u") -> Dict[str, Any]:
    return {
        "type": "PullRequestEvent",
        "id": str(event_id),
        "actor": {"display_login": user},
        "payload": {
            "action": action,
            "pull_request": {"title": title, "issue_url": url, "updated_at": updated_at},
        },
    }


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        REPO_ORG="Wikia",
        REPO_NAME="app",
        DISCORD_WEBHOOK_ID="123",
        DISCORD_WEBHOOK_TOKEN="secret",
        CURSOR_PATH=tmp_path / "data" / "github-cache.json",
        HTTP_TIMEOUT=5,
        GITHUB_TOKEN=None,
    )
