"""Process-wide logging setup, called once from src.main."""

import logging

from config.settings import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=_FORMAT)
    # SQLAlchemy echo is driven by DEBUG; keep its logger quiet otherwise
    if not settings.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
