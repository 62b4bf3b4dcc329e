"""
Check Scheduler - runs check cycles once or on a fixed interval
"""

import asyncio
import logging
import signal
import sys
from datetime import timedelta

from calmdrafts.errors import DraftFetchError
from calmdrafts.models import CheckResult


logger = logging.getLogger(__name__)


class CheckScheduler:
    """
    Drives DraftChecker cycles strictly one at a time.

    Continuous mode runs a cycle immediately and then on every tick of a fixed
    grid anchored at start-up. Ticks missed while a cycle is running collapse
    into a single immediate cycle. A stop request is observed between cycles;
    the running cycle only stops before its next deletion.
    """

    def __init__(self, checker, check_interval: timedelta):
        self.checker = checker
        self.check_interval = check_interval
        self.cycles_run = 0
        self.failed_cycles = 0
        self.interrupted = False
        self._stop_event = asyncio.Event()

    # === Run Modes ===

    async def run_once(self) -> CheckResult:
        """Run exactly one cycle; DraftFetchError propagates to the caller"""
        self.cycles_run += 1
        return await self.checker.check()

    async def run_forever(self) -> None:
        """Run cycles on check_interval until stop() is called"""
        interval = self.check_interval.total_seconds()
        if interval <= 0:
            raise ValueError("check_interval must be positive for continuous checking")

        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while not self._stop_event.is_set():
            await self._run_cycle()

            next_tick += interval
            now = loop.time()
            if next_tick < now:
                missed = int((now - next_tick) // interval)
                if missed:
                    logger.warning(f"Check took longer than the interval, skipping {missed} tick(s)")
                next_tick += missed * interval

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, next_tick - loop.time()))
            except asyncio.TimeoutError:
                continue

        logger.info(f"Scheduler stopped after {self.cycles_run} check(s)")

    async def _run_cycle(self) -> None:
        self.cycles_run += 1
        try:
            await self.checker.check()
        except DraftFetchError as error:
            self.failed_cycles += 1
            logger.error(f"Error during check: {error}")

    # === Shutdown ===

    def stop(self) -> None:
        """Request shutdown; takes effect between cycles or before the next deletion"""
        self.interrupted = True
        self.checker.interrupt()
        self._stop_event.set()

    def install_signal_handlers(self) -> None:
        """Route SIGINT/SIGTERM to stop(); must be called from inside the running loop"""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_interrupt, sig)

    def _handle_interrupt(self, sig) -> None:
        """First signal stops gracefully, a second one exits immediately"""
        if not self.interrupted:
            logger.info(f"Received {signal.Signals(sig).name}, shutting down gracefully...")
            self.stop()
        else:
            logger.warning("Force quit requested. Exiting immediately.")
            sys.exit(1)
