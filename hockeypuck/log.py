"""Logging output for the keyserver, with log file reopening on signals."""

from __future__ import annotations

import logging
import os
import signal
import sys

from hockeypuck.config import Settings, config, set_config

_LOGGER = logging.getLogger("hockeypuck")
_REOPEN_SIGNALS = ("SIGHUP", "SIGUSR1", "SIGUSR2")
_handler: logging.Handler | None = None


def log_file(settings: Settings) -> str:
    """Return the configured log file path, or an empty string."""
    return settings.get_string("hockeypuck.logfile")


def _settings() -> Settings:
    current = config()
    return current if current is not None else set_config("")


def _formatter() -> logging.Formatter:
    prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    prefix = prog.replace("%", "%%")
    return logging.Formatter(
        prefix + "%(asctime)s %(filename)s:%(lineno)d: %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
    )


def open_log() -> logging.Handler:
    """Direct keyserver logging to the configured file, or to stderr."""
    global _handler
    path = log_file(_settings())
    handler: logging.Handler | None = None
    failure: OSError | None = None
    if path:
        try:
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as exc:
            failure = exc
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter())

    previous, _handler = _handler, handler
    _LOGGER.addHandler(handler)
    if previous is not None:
        _LOGGER.removeHandler(previous)
        previous.close()
    _LOGGER.setLevel(logging.INFO)
    _LOGGER.propagate = False
    if failure is not None:
        _LOGGER.warning("Failed to open logfile %s", failure)
    return handler


def _reopen(signum, frame) -> None:
    open_log()
    _LOGGER.info("Reopened logfile")


def init_log() -> logging.Handler:
    """Open the log and, when logging to a file, reopen it on rotation signals.

    An unconfigured application is given empty settings first.
    """
    settings = _settings()
    if log_file(settings):
        for name in _REOPEN_SIGNALS:
            signum = getattr(signal, name, None)
            if signum is not None:
                signal.signal(signum, _reopen)
    return open_log()