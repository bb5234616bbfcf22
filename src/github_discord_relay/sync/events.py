from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from github_discord_relay.models import Cursor, NormalizedEvent, RawEvent
from github_discord_relay.utils.logging_utils import get_logger

PULL_REQUEST_EVENT = "PullRequestEvent"

log = get_logger("relay.events")


def _obj(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def normalize_one(raw: RawEvent) -> Optional[NormalizedEvent]:
    """Map one pull-request feed item; None if it lacks an id or timestamp."""
    actor = _obj(raw.get("actor"))
    payload = _obj(raw.get("payload"))
    pr = _obj(payload.get("pull_request"))
    try:
        return NormalizedEvent(
            id=raw.get("id"),
            user=actor.get("display_login"),
            title=pr.get("title"),
            action=payload.get("action"),
            url=pr.get("issue_url"),
            timestamp=pr.get("updated_at"),
        )
    except ValidationError as exc:
        log.warning("Skipping malformed %s %r: %s", raw.get("type"), raw.get("id"), exc.errors()[0]["msg"])
        return None


def normalize(raw_events: Iterable[RawEvent], event_type: str = PULL_REQUEST_EVENT) -> List[NormalizedEvent]:
    """Keep only events of `event_type`, in feed order."""
    out: List[NormalizedEvent] = []
    for raw in raw_events:
        if not isinstance(raw, dict) or raw.get("type") != event_type:
            continue
        event = normalize_one(raw)
        if event is not None:
            out.append(event)
    return out


def select_new(events: Iterable[NormalizedEvent], cursor: Cursor) -> List[NormalizedEvent]:
    # No dedup by id: an event whose updated_at moves forward is relayed again.
    return [e for e in events if e.timestamp > cursor.timestamp]


def advance(cursor: Cursor, delivered: Iterable[NormalizedEvent]) -> Cursor:
    """Cursor of the newest delivered event, never older than `cursor`."""
    newest = cursor
    for event in delivered:
        if event.timestamp > newest.timestamp:
            newest = event.to_cursor()
    return newest
