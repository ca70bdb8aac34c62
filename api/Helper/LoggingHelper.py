import sys

from loguru import logger

from AppSettings import settings

LOG_FORMAT = "[{level}][{time:YYYY-MM-DD HH:mm:ss}][{name}:{line}] {message}"


def setup_logging(level: str | None = None, serialize: bool | None = None):
    """Replaces loguru's default sink with a single stdout sink.

    Args:
        level: Minimum level to emit. Defaults to ``LOG_LEVEL`` from settings.
        serialize: Emit one JSON document per record. Defaults to ``LOG_JSON``.
    """
    level = level or settings.LOG_LEVEL
    serialize = settings.LOG_JSON if serialize is None else serialize

    logger.remove()
    if serialize:
        logger.add(sys.stdout, level=level, serialize=True)
    else:
        logger.add(sys.stdout, level=level, format=LOG_FORMAT)
