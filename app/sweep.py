"""
CLI entrypoint for the expired booking sweep. Run from cron, e.g.:

  python -m app.sweep

Or hourly: 0 * * * * cd /path/to/hotel-booking && .venv/bin/python -m app.sweep

This is a cleanup convenience; readers may still see an expired booking between runs.
"""

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import session_scope
from app.services.bookings import sweep_expired

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete bookings whose check-out date has passed."""
    settings = get_settings()
    try:
        with session_scope() as db:
            deleted = sweep_expired(db, settings, raise_errors=True)
    except SQLAlchemyError as e:
        logger.exception("Booking sweep failed: %s", e)
        return 1
    logger.info("Booking sweep completed: bookings_deleted=%s", deleted)
    return 0


if __name__ == "__main__":
    sys.exit(main())
