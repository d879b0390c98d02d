"""
Core execution: run context, queries, and the job scheduler.
"""

from prequery.core.context import RunContext
from prequery.core.executor import JobResult, run_all, run_job, run_jobs
from prequery.core.query import FALLBACK_INPUT, Query, QueryBuilder

__all__ = [
    "FALLBACK_INPUT",
    "JobResult",
    "Query",
    "QueryBuilder",
    "RunContext",
    "run_all",
    "run_job",
    "run_jobs",
]
