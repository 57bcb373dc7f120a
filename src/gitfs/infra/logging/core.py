from __future__ import annotations

"""
Logging Core Orchestrator.

Idempotent setup of the logging subsystem. Records go through a
QueueHandler to a QueueListener thread, so the worker threads of an eager
build never block on stderr or file I/O.
"""

import atexit
import logging
import os
import queue
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from gitfs.infra.fs import get_user_data_dir
from gitfs.infra.logging.config import _LEVEL_MAP, LoggingConfig
from gitfs.infra.logging.handlers import (
    _create_rotating_file_handler,
    _create_stream_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_gitfs_configured"
_QUEUE_LISTENER_ATTR: str = "_gitfs_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = "gitfs.log") -> str:
    """Standard log file location inside the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the target logger once, unless `force` is given.

    Only handlers previously installed by this function are replaced;
    foreign handlers (pytest caplog, host application) stay attached.

    Args:
        cfg: Logging settings.
        force: Re-initialize even if already configured.

    Returns:
        logging.Logger: The configured logger.
    """
    target = logging.getLogger(cfg.logger_name or None)

    if getattr(target, _CONFIGURED_FLAG_ATTR, False) and not force:
        return target

    level_int = _parse_level(cfg.level)
    target.setLevel(level_int)

    _remove_our_handlers(target)
    _stop_existing_listener(target)

    handlers_list: List[logging.Handler] = []
    if cfg.console:
        handlers_list.append(_create_stream_handler(level_int, logging.Formatter(cfg.console_fmt)))
    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh:
            handlers_list.append(fh)

    if not handlers_list:
        setattr(target, _CONFIGURED_FLAG_ATTR, True)
        return target

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()

    target.addHandler(queue_handler)
    setattr(target, _QUEUE_LISTENER_ATTR, listener)
    setattr(target, _CONFIGURED_FLAG_ATTR, True)

    atexit.register(_safe_stop_listener, listener)
    return target


def shutdown_logging(logger_name: str = "") -> None:
    """
    Flush pending records and detach everything configure_logging() added.
    """
    target = logging.getLogger(logger_name or None)
    _stop_existing_listener(target)
    _remove_our_handlers(target)
    setattr(target, _CONFIGURED_FLAG_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(target: logging.Logger) -> None:
    for h in list(target.handlers):
        if _is_our_handler(h):
            target.removeHandler(h)
            h.close()


def _stop_existing_listener(target: logging.Logger) -> None:
    listener = getattr(target, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        for h in listener.handlers:
            h.close()
        setattr(target, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a listener, draining its queue.

    A second stop (atexit after shutdown) is a no-op, and a handler whose
    stream is already closed does not break shutdown.
    """
    if listener is None:
        return
    try:
        if getattr(listener, "_thread", None) is not None:
            listener.stop()
    except (OSError, ValueError):
        pass
