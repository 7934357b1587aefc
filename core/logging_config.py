import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from core.config import settings


class PacificFormatter(logging.Formatter):
    """Render log timestamps in the business timezone."""

    def __init__(self, *args, tz_name: str = settings.business_timezone, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = ZoneInfo(tz_name)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc).astimezone(self.tz)
        return dt.strftime("%Y-%m-%d %H:%M:%S %Z")

    def format(self, record: logging.LogRecord) -> str:
        # Show only the module name, not the dotted path
        record.name = record.name.split('.')[-1]
        return super().format(record)


def setup_logging(level: int = logging.INFO) -> None:
    formatter = PacificFormatter(
        fmt="[%(levelname)s] %(asctime)s | %(name)s | %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Noisy libraries
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
