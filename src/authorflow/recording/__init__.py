"""Recording utilities for notifications."""

from __future__ import annotations

from authorflow.recording.file_recorder import FileNotificationRecorder, iter_notifications

__all__ = ["FileNotificationRecorder", "iter_notifications"]
