from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file rotation and clean shutdown.
"""

import io
import logging
from logging.handlers import QueueHandler
from pathlib import Path
from unittest.mock import patch

import pytest

from gitfs.infra.logging import LoggingConfig, configure_logging, shutdown_logging
from gitfs.infra.logging.core import _QUEUE_LISTENER_ATTR
from gitfs.infra.logging.handlers import _HANDLER_TAG_ATTR

LOGGER_NAME = "gitfs_test_logging"


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach everything configure_logging() installed on the test logger."""
    shutdown_logging(LOGGER_NAME)
    yield
    shutdown_logging(LOGGER_NAME)


def _ours(logger: logging.Logger):
    return [h for h in logger.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    """TC-01: Repeated configuration does not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True, logger_name=LOGGER_NAME)

    configure_logging(cfg)
    target = logging.getLogger(LOGGER_NAME)
    initial = len(target.handlers)

    configure_logging(cfg)
    assert len(target.handlers) == initial

    configure_logging(cfg, force=True)
    assert len(_ours(target)) == 1


def test_log_rotation(tmp_path: Path) -> None:
    """TC-02: The file rotates when the size limit is exceeded."""
    log_file = tmp_path / "rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        logger_name=LOGGER_NAME,
        max_bytes=100,
        backup_count=1,
    )
    configure_logging(cfg)
    logger = logging.getLogger(f"{LOGGER_NAME}.child")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Stopping the listener drains the queue.
    shutdown_logging(LOGGER_NAME)

    assert log_file.exists()
    assert (tmp_path / "rotate.log.1").exists()


def test_queue_listener_architecture() -> None:
    """TC-03: The logger only holds a tagged QueueHandler fed to a listener."""
    configure_logging(LoggingConfig(level="INFO", console=True, logger_name=LOGGER_NAME))
    target = logging.getLogger(LOGGER_NAME)

    handlers = _ours(target)
    assert len(handlers) == 1
    assert isinstance(handlers[0], QueueHandler)
    assert getattr(target, _QUEUE_LISTENER_ATTR) is not None


def test_file_receives_records(tmp_path: Path) -> None:
    """TC-04: Records below the level are dropped, others reach the file."""
    log_file = tmp_path / "app.log"
    configure_logging(LoggingConfig(
        level="warning", console=False, log_file=str(log_file), logger_name=LOGGER_NAME,
    ))
    logger = logging.getLogger(LOGGER_NAME)
    logger.info("quiet message")
    logger.warning("loud message")
    shutdown_logging(LOGGER_NAME)

    text = log_file.read_text(encoding="utf-8")
    assert "loud message" in text
    assert "quiet message" not in text
    assert "WARNING" in text


def test_shutdown_detaches_handlers() -> None:
    """TC-05: shutdown_logging() removes our handlers and the listener."""
    configure_logging(LoggingConfig(level="INFO", console=True, logger_name=LOGGER_NAME))
    target = logging.getLogger(LOGGER_NAME)
    foreign = logging.NullHandler()
    target.addHandler(foreign)
    try:
        shutdown_logging(LOGGER_NAME)
        assert _ours(target) == []
        assert foreign in target.handlers
        assert getattr(target, _QUEUE_LISTENER_ATTR) is None
    finally:
        target.removeHandler(foreign)


def test_unwritable_log_file_falls_back(tmp_path: Path, capsys) -> None:
    """TC-06: A log file that cannot be opened only disables file output."""
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    configure_logging(LoggingConfig(
        level="INFO", console=True, log_file=str(blocker / "sub" / "app.log"), logger_name=LOGGER_NAME,
    ))
    assert "cannot open log file" in capsys.readouterr().err
    assert len(_ours(logging.getLogger(LOGGER_NAME))) == 1


def test_shutdown_with_closed_console_stream() -> None:
    """TC-07: Shutdown succeeds after the console stream has been closed."""
    stream = io.StringIO()
    with patch("sys.stderr", stream):
        configure_logging(LoggingConfig(level="INFO", console=True, logger_name=LOGGER_NAME))
    stream.close()

    shutdown_logging(LOGGER_NAME)
    assert _ours(logging.getLogger(LOGGER_NAME)) == []
