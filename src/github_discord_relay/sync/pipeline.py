"""
One relay cycle: read cursor → fetch feed → keep new pull-request events →
post them to Discord oldest first → persist the newest delivered event.

Delivery stops at the first webhook failure and the cursor only covers events
that were actually posted, so a failed post is retried on the next cycle.
"""

from __future__ import annotations

from typing import Optional

from github_discord_relay.errors import CursorWriteError, DeliveryError, FetchError, RelayError
from github_discord_relay.models import CycleReport
from github_discord_relay.sync.cursors import CursorStore
from github_discord_relay.sync.events import advance, normalize, select_new
from github_discord_relay.sync.fetcher import EventFetcher
from github_discord_relay.sync.notifier import DiscordNotifier
from github_discord_relay.utils.logging_utils import get_logger
from github_discord_relay.utils.settings import Settings

log = get_logger("relay.pipeline")


class RelayPipeline:
    def __init__(
        self,
        settings: Settings,
        store: CursorStore,
        fetcher: EventFetcher,
        notifier: DiscordNotifier,
    ):
        self.settings = settings
        self.store = store
        self.fetcher = fetcher
        self.notifier = notifier

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayPipeline":
        return cls(
            settings,
            store=CursorStore(settings.CURSOR_PATH),
            fetcher=EventFetcher(settings),
            notifier=DiscordNotifier(settings),
        )

    def run_once(self) -> CycleReport:
        """Run a cycle and raise on failure. Delivery errors are re-raised after the cursor is saved."""
        last = self.store.read()
        report = CycleReport(cursor=last)

        raw = self.fetcher.fetch()
        report.fetched = len(raw)

        events = normalize(raw)
        report.matched = len(events)

        fresh = select_new(events, last)
        report.new = len(fresh)

        # The feed is newest first; post in the order things happened.
        pending = sorted(fresh, key=lambda e: e.timestamp)
        delivered = []
        failure: Optional[DeliveryError] = None
        for event in pending:
            try:
                self.notifier.notify(event)
            except DeliveryError as exc:
                failure = exc
                report.delivery_failed = True
                # select_new is strict, so the cursor has to stay below the failed
                # event; delivered events sharing its timestamp go out again.
                delivered = [e for e in delivered if e.timestamp < event.timestamp]
                break
            delivered.append(event)
            report.delivered += 1

        newest = advance(last, delivered)
        if newest != last:
            self.store.write(newest)
            report.cursor = newest
            report.cursor_advanced = True

        if failure is not None:
            report.error = str(failure)
            raise failure
        return report

    def run_cycle(self) -> Optional[CycleReport]:
        """Scheduler entry point; logs every failure and never raises."""
        try:
            report = self.run_once()
        except FetchError as exc:
            log.warning("Fetch failed, skipping cycle: %s", exc)
            return None
        except DeliveryError as exc:
            log.error("Delivery failed, will retry next cycle: %s", exc)
            return None
        except CursorWriteError as exc:
            log.error("Cursor not saved: %s", exc)
            return None
        except RelayError as exc:
            log.error("Cycle failed: %s", exc)
            return None
        except Exception:
            log.exception("Unexpected error during cycle")
            return None

        log.info(report.summary())
        return report


def run_sync(settings: Settings) -> Optional[CycleReport]:
    return RelayPipeline.from_settings(settings).run_cycle()
