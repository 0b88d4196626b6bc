import logging

from evaltrack.core.config import settings


LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # SQL echo stays off unless explicitly debugging the store.
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
