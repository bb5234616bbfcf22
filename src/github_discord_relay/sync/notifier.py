import re
import time
from typing import Any, Dict, Mapping, Optional

import requests

from github_discord_relay.errors import DeliveryError
from github_discord_relay.models import NormalizedEvent
from github_discord_relay.utils.logging_utils import get_logger
from github_discord_relay.utils.settings import Settings

# Discord rejects message content longer than this
DISCORD_CONTENT_LIMIT = 2000

log = get_logger("relay.notifier")


def render_template(template: str, data: Mapping[str, Any]) -> str:
    """Replace every {key} in `template`; None renders as an empty string."""
    for key, value in data.items():
        template = re.sub(
            r"\{" + re.escape(key) + r"\}",
            lambda _m, v=value: "" if v is None else str(v),
            template,
        )
    return template


def truncate(text: str, limit: int = DISCORD_CONTENT_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class DiscordNotifier:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def render(self, event: NormalizedEvent) -> str:
        data = {
            "user": event.user,
            "verb": event.action,
            "title": event.title,
            "link": event.url,
        }
        return truncate(render_template(self.settings.MESSAGE_TEMPLATE, data))

    def form(self, event: NormalizedEvent) -> Dict[str, str]:
        return {"content": self.render(event), "tts": "false"}

    def notify(self, event: NormalizedEvent) -> None:
        """POST one event to the webhook, waiting out Discord's 429s."""
        body = self.form(event)
        attempts = self.settings.DELIVERY_MAX_ATTEMPTS
        for attempt in range(1, attempts + 1):
            try:
                r = self.session.post(
                    self.settings.webhook_url,
                    data=body,
                    headers={"User-Agent": self.settings.USER_AGENT},
                    timeout=self.settings.HTTP_TIMEOUT,
                )
            except requests.RequestException as exc:
                raise DeliveryError(f"Webhook delivery failed for event {event.id}: {exc}") from exc

            if r.status_code == 429 and attempt < attempts:
                wait = _retry_after(r)
                log.info("Webhook rate limited; retrying event %s in %.1fs", event.id, wait)
                time.sleep(wait)
                continue
            if r.status_code >= 400:
                raise DeliveryError(
                    f"Webhook rejected event {event.id}: HTTP {r.status_code} {r.text[:200]}"
                )
            log.debug("Delivered event %s", event.id)
            return


def _retry_after(r: requests.Response) -> float:
    try:
        return max(float(r.headers.get("Retry-After", "1")), 0.0)
    except ValueError:
        return 1.0
