import logging
import os
from collections import OrderedDict
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

from codereview.core.settings import get_config

_ROOT_NAME = "codereview"


def setup_logger(
    name: str = _ROOT_NAME,
    *,
    log_dir: Optional[Path] = None,
    logger_level: int = logging.DEBUG,
    stream_level: int = logging.INFO,
    add_stream_handler: bool = True,
    file_level: int = logging.DEBUG,
    add_file_handler: bool = True,
    propagate: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    structlog_json: bool = True,
    structlog_bind: Optional[dict] = None,
) -> structlog.stdlib.BoundLogger:
    """Configure a structlog logger backed by stdlib handlers.

    Sets up a rotating file handler and a console handler on the given logger. The log
    file defaults to ``<APP.LOG_DIR>/codereview.log`` for the root logger and
    ``<APP.LOG_DIR>/modules/<name>.log`` for children.

    Args:
        name: Logger name, defaults to "codereview".
        log_dir: Custom directory for log files.
        logger_level: Overall logger level.
        stream_level: StreamHandler level.
        add_stream_handler: Whether to add a stream handler.
        file_level: FileHandler level.
        add_file_handler: Whether to add a file handler.
        propagate: Whether records propagate to ancestor loggers.
        max_bytes: Maximum size in bytes before rotating the log file.
        backup_count: Number of rotated files to retain.
        structlog_json: Render JSON when True, otherwise use the console renderer.
        structlog_bind: Fields bound to every event of the returned logger.

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance.
    """
    if log_dir is None:
        log_dir = Path(get_config().log_dir)

    child_log_path = f"{name}.log" if name == _ROOT_NAME else os.path.join("modules", f"{name}.log")
    log_file_path = os.path.join(log_dir, child_log_path)

    renderer = structlog.processors.JSONRenderer() if structlog_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _enforce_key_order_processor(
                [
                    "timestamp",
                    "event",
                    "request_id",
                    "duration_ms",
                    "level",
                    "logger",
                ]
            ),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    stdlib_logger = logging.getLogger(name)
    for handler in list(stdlib_logger.handlers):
        stdlib_logger.removeHandler(handler)
        handler.close()
    stdlib_logger.setLevel(logger_level)
    stdlib_logger.propagate = propagate

    if add_stream_handler:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(stream_level)
        stream_handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(stream_handler)

    if add_file_handler:
        os.makedirs(Path(log_file_path).parent, exist_ok=True)
        file_handler = RotatingFileHandler(filename=str(log_file_path), maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(file_handler)

    bound_logger = structlog.get_logger(name)
    if structlog_bind:
        bound_logger = bound_logger.bind(**structlog_bind)
    return bound_logger


def _enforce_key_order_processor(key_order: list[str]):
    def _processor(_logger, _method_name, event_dict):
        ordered = OrderedDict()
        for key in key_order:
            if key in event_dict:
                ordered[key] = event_dict.pop(key)
        for k in sorted(event_dict.keys()):
            ordered[k] = event_dict[k]
        return ordered

    return _processor


def get_logger(name: str | None = _ROOT_NAME, **kwargs) -> structlog.stdlib.BoundLogger:
    """Create or retrieve a named logger under the ``codereview`` hierarchy.

    Child loggers propagate to the ``codereview`` root logger, which owns the stream
    handler; they only add their own rotating file.

    Example:
        .. code-block:: python

            from codereview.core.logging import get_logger

            logger = get_logger("services.assignments")
            logger.info("assignment_created", assignment_id="...")
    """
    if not name:
        name = _ROOT_NAME

    full_name = name if name.startswith(_ROOT_NAME) else f"{_ROOT_NAME}.{name}"
    kwargs.setdefault("propagate", True)
    if kwargs["propagate"] and full_name != _ROOT_NAME:
        kwargs.setdefault("add_stream_handler", False)
    return setup_logger(full_name, **kwargs)
