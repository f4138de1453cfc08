"""Console logging for AuthorFlow.

Records carry the project and section an agent call works on, so interleaved calls can be
told apart. Bind them with :func:`workflow_context`.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any, Iterator

from rich.logging import RichHandler

_HANDLER_NAME = "authorflow-console"
_LOG_FORMAT = "project=%(project)s section=%(section)s %(name)s: %(message)s"

_project_var: contextvars.ContextVar[str] = contextvars.ContextVar("authorflow_project", default="-")
_section_var: contextvars.ContextVar[str] = contextvars.ContextVar("authorflow_section", default="-")


class _WorkflowFields(logging.Filter):
    """Stamp ``project`` and ``section`` on every record passing the handler."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.project = _project_var.get()  # type: ignore[attr-defined]
        record.section = _section_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def workflow_context(*, project_id: str | None, section_id: str | None = None) -> Iterator[None]:
    """Bind ids to log records emitted inside the block.

    A missing ``section_id`` keeps the section bound by an enclosing block.
    """

    project_token = _project_var.set(project_id or "-")
    section_token = _section_var.set(section_id or _section_var.get())
    try:
        yield
    finally:
        _section_var.reset(section_token)
        _project_var.reset(project_token)


def configure_logging(level: str = "INFO") -> None:
    """Route the root logger through one rich console handler at ``level``.

    Calling it again swaps the handler rather than stacking a second one.
    """

    handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(_WorkflowFields())
    # rich renders time and level itself
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root = logging.getLogger()
    for old in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """``logger.exception`` with ``key=value`` context appended to the message."""

    if not context:
        logger.exception(msg)
        return
    details = " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
    logger.exception("%s (%s)", msg, details)
