"""
Logging utilities for the layer balancer.
"""

import json
import logging
import sys
from datetime import datetime, timezone

CONTEXT_FIELDS = ('layer', 'region', 'version')


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON document per log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        return json.dumps(log_data)


class SimpleFormatter(logging.Formatter):
    """
    Human-readable formatter.
    """

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(level: str = 'WARNING', structured: bool = False) -> None:
    """
    Configure logging for the command line tool.

    Records go to stderr so that stdout only carries command output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Use structured JSON logging if True, simple format if False
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(StructuredFormatter() if structured else SimpleFormatter())
    root_logger.addHandler(console_handler)

    for noisy in ('botocore', 'aiobotocore', 'boto3', 'urllib3', 'aiohttp'):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class RegionLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds the layer and region being worked on.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        for name in ('layer', 'region'):
            if name in self.extra:
                extra.setdefault(name, self.extra[name])

        kwargs['extra'] = extra
        return f"[{self.extra.get('region', '-')}] {msg}", kwargs
