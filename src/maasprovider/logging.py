# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

import logging
import sys

from pythonjsonlogger import jsonlogger
import structlog
from structlog.contextvars import merge_contextvars


class ProviderJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record: logging.LogRecord, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["logger"] = f"{record.name}:{record.lineno}"
        log_record["level"] = record.levelname


def configure_logging(level=logging.INFO, stream=None):
    """Render structlog events as JSON lines through the stdlib logger.

    Logs go to stderr by default, since stdout carries the command output.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            # "event" becomes "msg" and the rest is passed in "extra", which
            # the JSON formatter renders.
            structlog.stdlib.render_to_log_kwargs,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(
        stream=sys.stderr if stream is None else stream
    )
    handler.setFormatter(ProviderJsonFormatter())
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    return handler
