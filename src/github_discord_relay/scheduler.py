"""Interval scheduling for the relay: run now, then every POLL_INTERVAL_MS."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from github_discord_relay.sync.pipeline import RelayPipeline
from github_discord_relay.utils.logging_utils import get_logger
from github_discord_relay.utils.settings import Settings

JOB_ID = "relay-cycle"

log = get_logger("relay.scheduler")


def build_scheduler(settings: Settings, job: Callable[[], object]) -> BlockingScheduler:
    scheduler = BlockingScheduler()
    scheduler.add_job(
        job,
        trigger=IntervalTrigger(seconds=settings.interval_seconds),
        id=JOB_ID,
        replace_existing=True,
        next_run_time=datetime.now(),  # Run immediately on start
        # A cycle still running when the next tick fires is skipped, not overlapped
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def run_forever(settings: Settings) -> None:
    pipeline = RelayPipeline.from_settings(settings)
    scheduler = build_scheduler(settings, pipeline.run_cycle)
    log.info(
        "Relaying pull-request events from %s every %.1fs",
        settings.repo_id,
        settings.interval_seconds,
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        log.info("Stopping relay")
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
