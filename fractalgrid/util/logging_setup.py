import logging
import logging.handlers
import multiprocessing as mp
from contextlib import contextmanager
from typing import Iterator, Optional

_LOGGER_NAME = "fractalgrid"

DEFAULT_LOG_FILE = "fractalgrid.log"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)

def parse_level(name: str) -> int:
    level = logging.getLevelName(str(name).strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {name!r}; choose one of: {', '.join(LEVELS)}")
    return level

def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

def _reset(logger: logging.Logger, level: int) -> logging.Logger:
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    return logger

def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(_build_formatter())
    logger.addHandler(handler)

def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = DEFAULT_LOG_FILE,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    logger = _reset(get_logger(), level)
    if console:
        _attach(logger, logging.StreamHandler(), level)
    if log_file:
        _attach(logger, logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        ), level)
    return logger

@contextmanager
def queue_logging(listener_logger: logging.Logger) -> Iterator[mp.Queue]:
    """Yield a queue for sampling workers; its records go to ``listener_logger``'s handlers."""
    queue: mp.Queue = mp.Queue(-1)
    listener = logging.handlers.QueueListener(queue, *listener_logger.handlers, respect_handler_level=True)
    listener.start()
    try:
        yield queue
    finally:
        listener.stop()
        queue.close()

def logging_initialiser(queue: Optional[mp.Queue], level: int) -> None:
    """Pool initializer hook: route this worker's package logger into ``queue``."""
    if queue is None:
        return
    # Unformatted: the listener side applies the formatter.
    qh = logging.handlers.QueueHandler(queue)
    qh.setLevel(level)
    _reset(get_logger(), level).addHandler(qh)
