from __future__ import annotations

from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from bookings.models import Booking
from payments.models import Payment


class UnitOfWork:
    """
    Scoped transaction handle for the payment verification steps.

    Entering opens ``transaction.atomic()``; every write goes through the
    handle, and leaving commits only when no exception escaped the block.
    """

    def __init__(self, using: str | None = None):
        self.using = using
        self._atomic = None

    def __enter__(self) -> "UnitOfWork":
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        atomic, self._atomic = self._atomic, None
        return atomic.__exit__(exc_type, exc_value, traceback)

    def get_payment_for_update(self, payment_id) -> Payment | None:
        try:
            return Payment.objects.select_for_update().get(pk=payment_id)
        except (Payment.DoesNotExist, ValueError):
            return None

    def mark_payment_paid(self, payment: Payment, *, verified_by=None) -> Payment:
        payment.payment_status = Payment.PAID
        payment.verified_at = timezone.now()
        payment.verified_by = verified_by
        payment.save(update_fields=["payment_status", "verified_at", "verified_by", "updated_at"])
        return payment

    def increment_paid_amount(self, booking_id, amount: Decimal) -> Booking:
        Booking.objects.filter(pk=booking_id).update(
            paid_amount=F("paid_amount") + amount,
            updated_at=timezone.now(),
        )
        return (
            Booking.objects.select_for_update()
            .select_related("slot__court")
            .get(pk=booking_id)
        )

    def set_booking_status(self, booking: Booking, status: str) -> Booking:
        booking.status = status
        booking.save(update_fields=["status", "updated_at"])
        return booking
