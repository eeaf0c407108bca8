from __future__ import annotations

import sys
from logging import INFO, FileHandler, Formatter, Handler, Logger, LogRecord, StreamHandler, getLogger
from logging.handlers import QueueHandler, QueueListener
from queue import SimpleQueue
from typing import List, Optional, Tuple

LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"

# (logger, queue handler, listener) for every create_logger call still active
_listeners: List[Tuple[Logger, QueueHandler, QueueListener]] = []


class LocalQueueHandler(QueueHandler):
    """Hands records to the listener thread without formatting them.

    Worker threads log from inside timed cycles, so they only pay for an
    enqueue.
    """

    def prepare(self, record: LogRecord) -> LogRecord:
        return record


def has_level_handler(logger: Logger) -> bool:
    """True if a handler on ``logger`` or its propagating parents emits at its level."""
    level = logger.getEffectiveLevel()
    current: Optional[Logger] = logger

    while current:
        if any(handler.level <= level for handler in current.handlers):
            return True
        if not current.propagate:
            break
        current = current.parent

    return False


def create_logger(
    logger_name: str = "poolbench",
    log_level: int = INFO,
    log_file: Optional[str] = None,
) -> Logger:
    """Configures the benchmark logger.

    Records go through a queue to stderr and, if ``log_file`` is given, to that
    file. Nothing is attached when the logger already has a handler at its
    level, so embedding applications keep their own setup.
    """
    logger = getLogger(logger_name)
    logger.setLevel(log_level)

    if has_level_handler(logger):
        return logger

    formatter = Formatter(LOG_FORMAT)
    handlers: List[Handler] = [StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)

    queue: SimpleQueue[LogRecord] = SimpleQueue()
    queue_handler = LocalQueueHandler(queue)
    listener = QueueListener(queue, *handlers, respect_handler_level=True)
    listener.start()

    _listeners.append((logger, queue_handler, listener))
    logger.addHandler(queue_handler)
    return logger


def shutdown_logging() -> None:
    """Flush pending records, then detach and close everything create_logger added."""
    while _listeners:
        logger, queue_handler, listener = _listeners.pop()
        logger.removeHandler(queue_handler)
        listener.stop()
        for handler in listener.handlers:
            if isinstance(handler, FileHandler):
                handler.close()
