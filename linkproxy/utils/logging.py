"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Every log line is a single JSON object:
{
    "timestamp": "2026-01-02T12:00:00.000Z",
    "level": "INFO",
    "logger": "linkproxy.lambdas.access_link.app",
    "message": "Serving folder listing. Responding with 200.",
    "shortcode": "k3x9q",
    "event": "FOLDER_LISTED"
}

Fields passed through `extra=` are attached as top-level keys. Tracebacks are
attached under "exception".
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from linkproxy.utils.constants import LOG_LEVEL_ENV


# Attributes every LogRecord carries; anything else came from `extra=`
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', logging.INFO, '', 0, '', None, None))) | {'message', 'asctime', 'taskName'}

# Chatty third-party loggers (one line per upstream request)
_QUIET_LOGGERS = ('httpx', 'httpcore', 'botocore', 'urllib3')


class JsonFormatter(logging.Formatter):
    """Render a LogRecord (and its `extra` fields) as one JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec='milliseconds') \
                            .replace('+00:00', 'Z')
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update({key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS})

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str, ensure_ascii=False)


def initialize_logging(level: str | None = None) -> None:
    """Route all logging through a JSON stdout handler

    Args:
        level (str | None):
            Root log level. Defaults to $LOG_LEVEL, then 'INFO'.
    """
    log_level = (level or os.getenv(LOG_LEVEL_ENV, 'INFO')).upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {name: {'level': 'WARNING'} for name in _QUIET_LOGGERS},
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
