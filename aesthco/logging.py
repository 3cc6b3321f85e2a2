"""
Logging yapılandırması.

Her kayıt o anki isteğin id'sini taşır (request_id_var; main.py'deki middleware set eder),
böylece checkout/notify logları X-Request-ID ile eşleştirilebilir. İstek dışında "-" yazılır.
Bildirim hatalarında logger.exception kullanılır (aesthco/services/notifier.py).
"""
import logging
import sys
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s"

# Çok konuşan kütüphaneler en az WARNING
NOISY_LOGGERS = ("sqlalchemy.engine", "slowapi")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


def setup_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(RequestIdFilter())
    # Uvicorn loggers: access ve error seviyelerini uyumlu tut
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    # uygulama logger ağacı: aesthco.checkout, aesthco.notify, ...
    logging.getLogger("aesthco").setLevel(level)
