"""
Booking status state machine.

  PENDING ──► CONFIRMED ──► COMPLETED   (manual, or by transfer to SIMRS)
     │            │    └──► CHECKIN ──► COMPLETED / CANCELLED
     └──► CANCELLED ◄┘

COMPLETED and CANCELLED are terminal. Only the transfer sets no_rawat.
"""

import logging

from django.db import transaction

from .exceptions import BlockError, PreconditionError
from .models import Booking

logger = logging.getLogger(__name__)

Status = Booking.Status

ALLOWED_TRANSITIONS = {
    Status.PENDING: {Status.CONFIRMED, Status.CANCELLED},
    Status.CONFIRMED: {Status.COMPLETED, Status.CANCELLED, Status.CHECKIN},
    Status.CHECKIN: {Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}

TERMINAL_STATUSES = {Status.COMPLETED, Status.CANCELLED}


def can_transition(current, target) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, set())


def is_terminal(status) -> bool:
    return status in TERMINAL_STATUSES


def change_status(booking, target):
    """
    Manual admin transition. Setting the current status again is a no-op.

    Raises:
        BlockError: INVALID_STATUS_TRANSITION
    """
    if target not in Status.values:
        raise BlockError(
            message=f"Status tidak dikenal: {target!r}",
            code='INVALID_STATUS',
            detail={'allowed': list(Status.values)},
            http_status=400,
        )

    current = booking.status
    if not can_transition(current, target):
        raise BlockError(
            message=f"Status booking tidak dapat diubah dari {current} ke {target}",
            code='INVALID_STATUS_TRANSITION',
            detail={
                'current_status': current,
                'requested_status': target,
                'allowed': sorted(ALLOWED_TRANSITIONS.get(current, set())),
            },
        )

    if current != target:
        booking.status = target
        booking.save(update_fields=['status', 'updated_at'])
        logger.info("[Lifecycle] booking=%s %s → %s", booking.kode_booking, current, target)
    return booking


@transaction.atomic
def mark_transferred(booking_id, no_rawat):
    """
    CONFIRMED → COMPLETED with the registry visit id. Row-locked.

    Raises:
        PreconditionError: BOOKING_STATUS_CHANGED if the booking left
                           CONFIRMED while the transfer was running
    """
    booking = Booking.objects.select_for_update().get(id=booking_id)
    if booking.status != Status.CONFIRMED:
        raise PreconditionError(
            message=f"Status booking berubah menjadi {booking.status} selama transfer",
            code='BOOKING_STATUS_CHANGED',
            detail={'current_status': booking.status, 'no_rawat': no_rawat},
        )

    booking.status = Status.COMPLETED
    booking.no_rawat = no_rawat
    booking.save(update_fields=['status', 'no_rawat', 'updated_at'])
    logger.info("[Lifecycle] booking=%s CONFIRMED → COMPLETED no_rawat=%s", booking.kode_booking, no_rawat)
    return booking
