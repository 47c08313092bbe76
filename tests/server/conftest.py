"""Configuration specific to server tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _suppress_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Suppress console log output from the server under test."""

    class SilentStreamHandler(logging.Handler):
        def __init__(self, stream: object = None) -> None:
            super().__init__()

        def emit(self, record: logging.LogRecord) -> None:
            pass

    monkeypatch.setattr("logging.StreamHandler", SilentStreamHandler)
