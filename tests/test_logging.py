"""
Tests for job-tagged logging output.
"""

import io
import logging

import pytest
from rich.console import Console

from prequery.utils.logging import get_logger, job_context, setup_logging


@pytest.fixture
def rich_output():
    """Route the prequery console handler into a buffer, restoring handlers afterwards."""
    buffer = io.StringIO()
    setup_logging(level="DEBUG", console=Console(file=buffer, width=200))
    yield buffer
    prequery_logger = logging.getLogger("prequery")
    for handler in prequery_logger.handlers[:]:
        prequery_logger.removeHandler(handler)
        handler.close()


class TestJobPrefix:
    def test_plain_record_is_tagged(self, rich_output):
        with job_context("fetch"):
            get_logger("prequery.tests").info("beginning job...")
        assert "[fetch] beginning job..." in rich_output.getvalue()

    def test_record_with_traceback_is_tagged(self, rich_output):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            with job_context("fetch"):
                get_logger("prequery.tests").debug("job failure details", exc_info=e)
        output = rich_output.getvalue()
        assert "[fetch] job failure details" in output
        assert "boom" in output

    def test_untagged_outside_job(self, rich_output):
        get_logger("prequery.tests").info("all 1 job(s) finished")
        output = rich_output.getvalue()
        assert "all 1 job(s) finished" in output
        assert "[fetch]" not in output
