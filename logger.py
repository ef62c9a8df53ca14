import sys

from loguru import logger

from config import LOG_FILE, LOG_LEVEL

logger.remove()
logger.configure(extra={"component": "app"})
logger.add(
    sys.stdout,
    level=LOG_LEVEL,
    backtrace=False,
    diagnose=False,
    colorize=True,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | {extra[component]} | {message}",
)
if LOG_FILE:
    logger.add(
        LOG_FILE,
        rotation="20 MB",
        retention="14 days",
        level=LOG_LEVEL,
        enqueue=True,
        serialize=True,
    )


def get_logger(name: str = "app"):
    return logger.bind(component=name)
