import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger import jsonlogger

# trace id of the request being served, set by the HTTP middleware
TRACE_ID_CTX: ContextVar[str] = ContextVar("trace_id", default=None)

# third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "passlib")


class TraceIdFilter(logging.Filter):
    def filter(self, record):
        record.trace_id = TRACE_ID_CTX.get(None)
        return True


def setup_logging(level: str | int = logging.INFO, service: str = "busbooking"):
    """Route every record through one JSON handler on stdout.

    Fields passed as ``extra=`` (bus_id, seat_number, booking_id, ...) end
    up as top-level keys of the JSON line.
    """
    root = logging.getLogger()
    handler = logging.StreamHandler(sys.stdout)
    fmt = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s",
        rename_fields={"levelname": "level", "asctime": "ts"},
        static_fields={"service": service},
    )
    handler.setFormatter(fmt)
    handler.addFilter(TraceIdFilter())
    root.setLevel(level)
    root.handlers = []
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
