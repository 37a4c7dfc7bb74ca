import logging
from celery import shared_task

from .exceptions import BaseAppException, RegistryUnavailable

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=10,   # base delay in seconds, doubled on every retry
    acks_late=True,           # ack only after the task ran, survives worker crashes
    reject_on_worker_lost=True,
)
def reconcile_booking_transfer(self, booking_id: str):
    """
    Complete a booking whose SIMRS registration was written but whose status
    update failed.

    Retry policy:
      - registry/primary store unreachable → up to 3 retries, 10s → 20s → 40s
      - business outcome (nothing to reconcile, booking cancelled, ...) → stop
    """
    from django.db import DatabaseError
    from booking.transfer import reconcile_booking

    logger.info("[Celery][reconcile] booking_id=%s (attempt %d/%d)",
                booking_id, self.request.retries + 1, self.max_retries + 1)

    try:
        booking = reconcile_booking(booking_id)
    except (RegistryUnavailable, DatabaseError) as exc:
        if self.request.retries < self.max_retries:
            countdown = self.default_retry_delay * (2 ** self.request.retries)
            logger.warning("[Celery][reconcile] booking_id=%s failed: %s, retrying in %ds",
                           booking_id, exc, countdown)
            raise self.retry(exc=exc, countdown=countdown)
        logger.error("[Celery][reconcile] booking_id=%s gave up after %d retries: %s",
                     booking_id, self.max_retries, exc)
        raise
    except BaseAppException as exc:
        logger.warning("[Celery][reconcile] booking_id=%s not reconciled: %s %s",
                       booking_id, exc.code, exc.message)
        return None

    logger.info("[Celery][reconcile] booking_id=%s → %s no_rawat=%s",
                booking_id, booking.status, booking.no_rawat)
    return booking.no_rawat


@shared_task
def sweep_unreconciled_transfers():
    """
    Periodic (celery beat): reconcile every CONFIRMED booking within
    RECONCILE_WINDOW_DAYS of today that already has a visit in SIMRS.
    Returns the number of bookings completed.
    """
    from booking.transfer import find_reconcilable_bookings, reconcile_booking

    reconciled = 0
    for booking in find_reconcilable_bookings():
        try:
            reconcile_booking(booking.id)
        except RegistryUnavailable as exc:
            logger.error("[Celery][sweep] registry unavailable, stopping sweep: %s", exc.message)
            break
        except BaseAppException as exc:
            logger.debug("[Celery][sweep] booking=%s skipped: %s", booking.kode_booking, exc.code)
            continue
        reconciled += 1

    logger.info("[Celery][sweep] reconciled %d booking(s)", reconciled)
    return reconciled
