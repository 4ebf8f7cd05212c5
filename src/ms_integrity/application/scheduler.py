"""Background loop that runs the consistency checker on a fixed interval."""

import asyncio
import logging

from src.ms_integrity.application.checker import ConsistencyChecker

logger = logging.getLogger(__name__)


async def run_periodic_scan(checker: ConsistencyChecker, interval: float) -> None:
    """Scan forever; a failed scan is logged and retried next tick. Cancel to stop."""
    while True:
        await asyncio.sleep(interval)
        try:
            report = await checker.scan()
        except Exception:
            logger.exception("Integrity scan failed")
            continue
        if not report.ok:
            logger.warning(
                "Integrity scan found %d violation(s), %d repaired",
                len(report.violations),
                len(report.repaired),
            )
