import logging
import sys
from logging.config import dictConfig

from cancelflow.config import settings

CTX_FIELDS = ("rid", "user_id", "cancellation_id")


class CtxFilter(logging.Filter):
    """Fills context fields so the formatter never fails when extra is missing."""
    def filter(self, record: logging.LogRecord) -> bool:
        for k in CTX_FIELDS:
            if not hasattr(record, k):
                setattr(record, k, "-")
        return True


def setup_logging(level: str | None = None, json_fmt: bool | None = None) -> None:
    """Base logging setup for the whole app (web server, scripts)."""
    level = (level or settings.log_level).upper()
    json_fmt = settings.log_json if json_fmt is None else json_fmt

    if json_fmt:
        formatter = {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s "
                   "%(rid)s %(user_id)s %(cancellation_id)s",
            "json_ensure_ascii": False,
        }
    else:
        formatter = {
            "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s "
                      "| rid=%(rid)s user=%(user_id)s cancel=%(cancellation_id)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"ctx": {"()": CtxFilter}},
        "formatters": {"default": formatter},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "default",
                "filters": ["ctx"],
            }
        },
        "root": {"level": level, "handlers": ["stdout"]},
        "loggers": {
            # SQL statements only when debugging
            "sqlalchemy.engine": {"level": settings.log_sql.upper()},
            "apscheduler": {"level": "WARNING"},
            "uvicorn": {"level": level},
            "uvicorn.error": {"level": level},
            "uvicorn.access": {"level": level},
            "cancelflow": {"level": level},
        },
    })

    logging.getLogger(__name__).info("logging_ready json=%s level=%s", json_fmt, level)
