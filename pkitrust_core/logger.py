"""
pkitrust_core.logger
--------------------
Structured logging for the PKI components.

Every module logs under the `PKI` hierarchy (`PKI.TrustStore`,
`PKI.Validation`, `PKI.Generation`, `PKI.Manager`) and each line is one JSON
object with UTC timestamps:

    {"ts": "2024-05-01T12:00:00Z", "level": "INFO", "name": "PKI.TrustStore", "msg": "..."}

Environment:
    PKI_LOG_LEVEL   level name applied when `level` is not given (default INFO)
    PKI_LOG_FILE    optional file that receives a copy of every line
"""

import json
import logging
import os
import sys
import time

DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; the message is escaped, never spliced in."""

    converter = time.gmtime

    def __init__(self):
        super().__init__(datefmt=DATE_FORMAT)

    def format(self, record):
        line = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line)


def get_logger(name="PKI", level=None, to_file=None):
    """Return the named PKI logger, attaching handlers on first use only."""
    logger = logging.getLogger(name)
    if level is None:
        level = os.getenv("PKI_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = JsonLineFormatter()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    to_file = to_file or os.getenv("PKI_LOG_FILE")
    if to_file:
        os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
        file_handler = logging.FileHandler(to_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
