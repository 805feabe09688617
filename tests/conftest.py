"""Shared fixtures for retag tests."""

from __future__ import annotations

import pytest


class RecordingLogger:
    """LoggerProtocol implementation that keeps every message."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(('info', message))

    def warning(self, message: str) -> None:
        self.messages.append(('warning', message))

    def error(self, message: str) -> None:
        self.messages.append(('error', message))

    def of_level(self, level: str) -> list[str]:
        return [message for lvl, message in self.messages if lvl == level]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
