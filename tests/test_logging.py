"""Tests for logging setup."""

from __future__ import annotations

import logging
from typing import Iterator

import pytest
from rich.logging import RichHandler

from authorflow.logging import configure_logging, log_exception, workflow_context


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_reconfiguring_keeps_a_single_console_handler(root_logger: logging.Logger) -> None:
    configure_logging("debug")
    configure_logging("WARNING")

    ours = [h for h in root_logger.handlers if isinstance(h, RichHandler)]
    assert len(ours) == 1
    assert len(ours[0].filters) == 1
    assert root_logger.level == logging.WARNING


def test_records_carry_the_bound_workflow_ids(root_logger: logging.Logger) -> None:
    """It should stamp the innermost project and the inherited section on records."""

    configure_logging("INFO")
    stamp = next(h for h in root_logger.handlers if isinstance(h, RichHandler)).filters[0]

    def fields() -> tuple[str, str]:
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "m", None, None)
        stamp.filter(record)
        return record.project, record.section  # type: ignore[attr-defined]

    with workflow_context(project_id="p1", section_id="2.1"):
        with workflow_context(project_id="p2"):
            assert fields() == ("p2", "2.1")
        assert fields() == ("p1", "2.1")
    assert fields() == ("-", "-")


def test_log_exception_appends_context(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("authorflow.test")

    with caplog.at_level(logging.ERROR, logger="authorflow.test"):
        try:
            raise ValueError("boom")
        except ValueError:
            log_exception(logger, "writer call failed", action="draft")

    assert caplog.records[-1].getMessage() == "writer call failed (action='draft')"
    assert caplog.records[-1].exc_info is not None
