"""
Logging setup for QuoteDesk.
Call setup_logging() once at app startup; modules use logging.getLogger(__name__).
"""
import logging

from quotedesk.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level=None):
    """Configure the root logger. Level defaults to the LOG_LEVEL env var."""
    level = (level or LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    # SQLAlchemy echo is controlled by DEBUG; keep its logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
