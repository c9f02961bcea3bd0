"""Recurring tick driver for the ledger and reminders."""

import logging
from datetime import datetime

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import Config, load_config, local_now
from .core.store import SessionStore
from .ports.notifier import Notifier
from .workflows import TickReport, open_store, run_tick

logger = logging.getLogger(__name__)

TICK_JOB_ID = "fitcal_tick"


def tick_now(store: SessionStore, notifier: Notifier, config: Config) -> TickReport:
    """Run one tick against the wall clock in the configured timezone."""
    return run_tick(store, notifier, config, local_now(config))


def add_tick_job(scheduler: BaseScheduler, func, args: list, config: Config) -> None:
    """Register the recurring tick. Ticks never overlap; missed runs collapse into one."""
    scheduler.add_job(
        func,
        IntervalTrigger(seconds=config.tick_seconds),
        args=args,
        id=TICK_JOB_ID,
        coalesce=True,
        max_instances=1,
        next_run_time=datetime.now(scheduler.timezone),
    )
    logger.info(f"Scheduled tick every {config.tick_seconds}s")


def setup_ticker(store: SessionStore, notifier: Notifier, config: Config) -> BlockingScheduler:
    """Set up a foreground scheduler that ticks the store."""
    scheduler = BlockingScheduler(timezone=config.timezone or None)
    add_tick_job(scheduler, tick_now, [store, notifier, config], config)
    return scheduler


def run_ticker(notifier: Notifier, config: Config | None = None) -> None:
    """Run the tick driver until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    if config is None:
        config = load_config()
    store = open_store(config)
    scheduler = setup_ticker(store, notifier, config)

    logger.info(f"Starting fitcal ticker on {config.data_path}")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Ticker stopped")
