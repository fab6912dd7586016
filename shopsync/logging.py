import logging
import sys
from pathlib import Path

import structlog

from .config import settings

# Loggers that emit one INFO line per HTTP request; pagination makes them noisy.
QUIET_LOGGERS = ("httpx", "httpcore")
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

def _add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", "shopsync")
    return event_dict

def setup_logging(level: str | None = None, error_file: str | None = None):
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    error_file = error_file if error_file is not None else settings.log_error_file

    handlers = []
    stdout = logging.StreamHandler(sys.stdout)
    stdout.setLevel(log_level)
    handlers.append(stdout)
    if error_file:
        Path(error_file).parent.mkdir(parents=True, exist_ok=True)
        errors = logging.FileHandler(error_file)
        errors.setLevel(logging.ERROR)
        handlers.append(errors)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)
    formatter = logging.Formatter("%(message)s")
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
    for name in SERVER_LOGGERS:
        logging.getLogger(name).setLevel(log_level)

def bind_job(job_id: str, account_id: str):
    """Tag every event logged by the current background task with the job."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(job_id=job_id, account_id=account_id)

def clear_job():
    structlog.contextvars.clear_contextvars()
