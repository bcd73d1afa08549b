#!/usr/bin/env python3
"""
Logging setup for the autoscaler

Every record carries the NodeGroup being reconciled (``%(nodegroup)s``), set
for the duration of a pass with ``nodegroup_context``.
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(nodegroup)s] %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(nodegroup)s] %(module)s:%(lineno)d - %(message)s"

# Chatty at DEBUG/INFO: the kubernetes client logs each request through urllib3
QUIET_LOGGERS = ("urllib3", "kubernetes", "uvicorn.access")

current_nodegroup: ContextVar[str] = ContextVar("current_nodegroup", default="-")


@contextmanager
def nodegroup_context(name: str):
    """Tag log records emitted inside the block with a NodeGroup name"""
    token = current_nodegroup.set(name)
    try:
        yield
    finally:
        current_nodegroup.reset(token)


class NodeGroupFilter(logging.Filter):
    """Copies the current NodeGroup name onto each record"""

    def filter(self, record):
        record.nodegroup = current_nodegroup.get()
        return True


class ColoredFormatter(logging.Formatter):
    """Colors the level name of console records"""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        # Copy so the file handler still sees the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log aggregators"""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": "nodegroup-autoscaler",
            "level": record.levelname,
            "logger": record.name,
            "nodegroup": getattr(record, "nodegroup", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    enable_colors: bool = True,
    log_format: str = DEFAULT_FORMAT,
    json_logs: bool = False
) -> None:
    """
    Configure the root logger

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional log file path, parent directories are created
        enable_colors: Color level names on the console (ignored with json_logs)
        log_format: Console record format
        json_logs: Emit JSON lines on the console instead of text
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_logs:
        console_formatter = JsonFormatter()
    elif enable_colors:
        console_formatter = ColoredFormatter(log_format)
    else:
        console_formatter = logging.Formatter(log_format)

    context_filter = NodeGroupFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(context_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.addFilter(context_filter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {level} level")
    if log_file:
        logger.info(f"Log file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
