"""Database initialization utilities."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from queue_desk.db import models  # noqa: F401 - ensure model metadata is registered
from queue_desk.db.session import Base, engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create any missing tables, constraints and indexes."""
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception("Database initialization failed.")
        raise
