import time
from typing import Dict, List, Optional

import requests

from github_discord_relay.errors import FetchError
from github_discord_relay.models import RawEvent
from github_discord_relay.utils.logging_utils import get_logger
from github_discord_relay.utils.settings import Settings

log = get_logger("relay.fetcher")


class EventFetcher:
    """Reads the recent public event feed of one GitHub repository."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def headers(self) -> Dict[str, str]:
        h = {
            "User-Agent": self.settings.USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if self.settings.GITHUB_TOKEN:
            h["Authorization"] = f"Bearer {self.settings.GITHUB_TOKEN}"
        return h

    def fetch(self) -> List[RawEvent]:
        # cb busts intermediary caches; GitHub ignores unknown params
        params = {"cb": int(time.time() * 1000)}
        url = self.settings.feed_url
        try:
            r = self.session.get(
                url,
                headers=self.headers(),
                params=params,
                timeout=self.settings.HTTP_TIMEOUT,
            )
            r.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"Could not fetch {url}: {exc}") from exc

        try:
            data = r.json()
        except ValueError as exc:
            raise FetchError(f"Malformed JSON from {url}: {exc}") from exc

        if not isinstance(data, list):
            raise FetchError(f"Expected a JSON array of events from {url}, got {type(data).__name__}")

        log.debug("Fetched %d events from %s", len(data), self.settings.repo_id)
        return data
