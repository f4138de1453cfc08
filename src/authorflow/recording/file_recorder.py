"""Notification log on disk.

Every notification the workbench raises becomes one JSON line, so a session's history
survives across CLI invocations and API restarts.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from authorflow.events import Notification


@dataclass
class FileNotificationRecorder:
    path: Path

    def __post_init__(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, notification: Notification) -> None:
        with self.path.open("a", encoding="utf-8") as out:
            out.write(notification.model_dump_json())
            out.write("\n")


def iter_notifications(path: Path) -> list[Notification]:
    """Read back a notification log. A log that was never written reads as empty."""

    if not path.exists():
        return []
    with path.open(encoding="utf-8") as src:
        return [Notification.model_validate_json(line) for line in src if line.strip()]
