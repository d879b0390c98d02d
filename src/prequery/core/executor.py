"""
Job scheduler.

Runs every configured preprocessor as its own asyncio task. Jobs are
independent: there is no ordering between them, and a failing job neither
cancels nor delays the others. The scheduler returns only after every task
has finished.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass

from prequery.processors.base import Preprocessor
from prequery.utils.logging import get_logger, job_context

logger = get_logger("prequery.core.executor")


@dataclass(frozen=True)
class JobResult:
    """
    Outcome of a single job.

    Attributes:
        name: The job's name
        error: The exception the job failed with, None on success
        duration_seconds: Wall time the job took
    """

    name: str
    error: Exception | None = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None


async def run_job(preprocessor: Preprocessor) -> JobResult:
    """Run one job, logging its start and outcome; failures are returned, not raised."""
    name = preprocessor.name
    with job_context(name):
        logger.info("beginning job...")
        start = time.monotonic()
        try:
            await preprocessor.run()
        except Exception as e:
            duration = time.monotonic() - start
            logger.error(f"job failed: {e}")
            logger.debug("job failure details", exc_info=e)
            return JobResult(name=name, error=e, duration_seconds=duration)
        duration = time.monotonic() - start
        logger.info(f"job finished in {duration:.2f}s")
        return JobResult(name=name, duration_seconds=duration)


async def run_jobs(preprocessors: Sequence[Preprocessor]) -> list[JobResult]:
    """
    Run all jobs concurrently and wait for every one of them.

    Returns:
        One JobResult per preprocessor, in the order given
    """
    tasks = [asyncio.create_task(run_job(preprocessor), name=preprocessor.name) for preprocessor in preprocessors]
    return list(await asyncio.gather(*tasks))


async def run_all(preprocessors: Sequence[Preprocessor]) -> bool:
    """
    Run all jobs and report overall success.

    Returns:
        True if every job succeeded
    """
    results = await run_jobs(preprocessors)
    failed = [result.name for result in results if not result.success]
    if failed:
        logger.error(f"{len(failed)} of {len(results)} job(s) failed: {', '.join(failed)}")
        return False
    logger.info(f"all {len(results)} job(s) finished")
    return True
