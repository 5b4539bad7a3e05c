"""Give back seats for cancelled bookings whose release never completed.

Meant to run on a schedule (cron, a scheduled task) against the deployed
store, e.g. `python -m scripts.release_pending_cancellations`.
"""

from loguru import logger

from app.database.dynamodb import get_record_store
from app.logging_config import configure_logging
from app.services.booking_service import BookingService


def release_pending_cancellations(store=None):
    """Run one sweep and return the number of bookings processed"""
    if store is None:
        store = get_record_store()

    processed = BookingService(store).release_pending_cancellations()
    logger.info(f"Pending cancellation sweep processed {processed} bookings")
    return processed


if __name__ == "__main__":
    configure_logging()
    release_pending_cancellations()
