import json
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone

from notesmarket.core.config import settings


class JsonFormatter(logging.Formatter):
    """One JSON object per line; whitelisted `extra` fields are lifted to the top level."""

    EXTRA_FIELDS = (
        "request_id", "user_id", "path", "method", "status_code", "latency_ms",
        "listing_id", "purchase_id", "note_id", "tx_hash",
        "claimed_price", "listing_price", "reason", "error", "count",
    )

    def __init__(self, env: str = "local"):
        super().__init__()
        self.env = env

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "env": self.env,
            "message": record.getMessage(),
        }
        payload.update(
            {name: getattr(record, name) for name in self.EXTRA_FIELDS if getattr(record, name, None) is not None}
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # Decimal prices and datetimes go out as strings
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> None:
    formatter = JsonFormatter(env=settings.app_env)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(
            RotatingFileHandler(
                settings.log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    root.handlers = handlers
    # request_completed from the HTTP middleware already covers access logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
