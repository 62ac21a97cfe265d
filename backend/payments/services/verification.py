from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from bookings.models import Booking
from core.errors import BadRequest, Conflict, NotFound, translate_storage_errors
from core.messages import ErrorMessage
from payments.models import Payment
from payments.rules import resolve_booking_status
from payments.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    payment: Payment
    booking: Booking
    success: bool = True
    message: str = ErrorMessage.PAYMENT_VERIFIED


class PaymentVerificationWorkflow:
    """
    Mark a payment as paid and roll its amount into the owning booking.

    The payment status write, the paid amount increment and the booking status
    change happen inside a single unit of work: either all of them commit or
    none do.
    """

    def __init__(self, unit_of_work_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self.unit_of_work_factory = unit_of_work_factory

    @translate_storage_errors(ErrorMessage.VERIFY_PAYMENT_FAILED)
    def verify(self, payment_id, *, verified_by=None) -> VerificationResult:
        if not payment_id:
            raise BadRequest(ErrorMessage.PAYMENT_ID_REQUIRED)

        logger.info("Verifying payment %s", payment_id)
        with self.unit_of_work_factory() as uow:
            payment = uow.get_payment_for_update(payment_id)
            if payment is None:
                raise NotFound(f"Payment with ID {payment_id} not found")

            if payment.payment_status == Payment.PAID:
                raise Conflict(ErrorMessage.PAYMENT_ALREADY_VERIFIED)

            payment = uow.mark_payment_paid(payment, verified_by=verified_by)
            booking = uow.increment_paid_amount(payment.booking_id, payment.payment_amount)

            updated_status = resolve_booking_status(
                booking.total_amount,
                booking.paid_amount,
                booking.slot.court.min_down_payment,
                booking.status,
            )
            if updated_status:
                booking = uow.set_booking_status(booking, updated_status)
                logger.info("Booking %s status updated to '%s'", booking.id, updated_status)

        logger.info(
            "Payment %s verified; booking %s paid_amount=%s",
            payment.id,
            booking.id,
            booking.paid_amount,
        )
        return VerificationResult(payment=payment, booking=booking)
