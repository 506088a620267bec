"""
Process-wide logging for the installer, set up once by ``main.py``.

Modules log diagnostics through ``logging.getLogger(__name__)``; they
go to stderr at the level picked by ``--debug``/``--verbose``/``--quiet``,
then ``UG4_LOG_LEVEL``, then WARNING.

The run's step announcements (``Part 3/9: ...``) are a separate
channel, the ``ug4bootstrap.progress`` logger. It writes to stdout with
a ``[YYYY-mm-dd HH:MM:SS]`` prefix, does not propagate to root and is
muted by ``--quiet`` except for warnings. With ``UG4_LOG_FILE`` set,
both channels are also written to that file.
"""

from __future__ import annotations

import logging
import sys

PROGRESS_LOGGER = "ug4bootstrap.progress"

_STAMP = "%Y-%m-%d %H:%M:%S"
_DETAILED = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d | %(message)s"

# (format, datefmt) for the stderr handler, most verbose first
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, _DETAILED, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)

# Kept at WARNING unless running with --debug
_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def _console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter("%(message)s")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet: bool = False,
) -> None:
    """Install handlers on the root and progress loggers.

    Args:
        level: Level name for stderr diagnostics.
        log_file: Extra file sink for diagnostics and progress.
        log_file_level: Level for ``log_file``; defaults to ``level``.
        quiet: Show only warnings on the progress channel.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    file_handler: logging.Handler | None = None
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        # Progress is INFO, so the file never filters above it
        file_handler.setLevel(min(file_level, logging.INFO))
        file_handler.setFormatter(logging.Formatter(_DETAILED, datefmt=_STAMP))
        root.addHandler(file_handler)

    root.setLevel(root_level)

    progress = logging.getLogger(PROGRESS_LOGGER)
    progress.handlers.clear()
    progress.propagate = False
    progress.setLevel(logging.WARNING if quiet else logging.INFO)
    stdout = logging.StreamHandler(sys.stdout)
    stdout.setFormatter(logging.Formatter("[%(asctime)s] %(message)s", datefmt=_STAMP))
    progress.addHandler(stdout)
    if file_handler is not None:
        progress.addHandler(file_handler)

    if console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def get_progress_logger() -> logging.Logger:
    """The logger services announce their steps on."""
    return logging.getLogger(PROGRESS_LOGGER)


def _parse_level(level: str | None) -> int:
    """Level name to number; unknown or empty names mean WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
