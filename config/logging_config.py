import sys
from pathlib import Path

from loguru import logger
from config.settings import settings

logger.remove()

logger.add(
    sys.stderr,
    level=settings.log_level,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {name}:{function}:{line} - {message}",
    colorize=True,
)

# Grade mutations are logged per user; keep a local trail unless disabled
if settings.log_to_file:
    logger.add(
        str(Path(settings.log_dir) / "cgpa_tracker_{time:YYYY-MM-DD}.log"),
        rotation="00:00",
        retention=settings.log_retention,
        compression="zip",
        level="DEBUG",
        serialize=settings.log_json,
        enqueue=True,
    )

logger.debug(f"Logging configured (env={settings.env}, level={settings.log_level})")

__all__ = ["logger"]
