from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

from bookings.models import Booking
from core.errors import NotFound
from core.messages import ErrorMessage


@dataclass(frozen=True)
class PaymentSummary:
    id: int
    payment_amount: Decimal
    payment_status: str


@dataclass(frozen=True)
class BookingDetails:
    """Financial view of a booking, as consumed by the payment services."""

    id: int
    user_id: int
    total_amount: Decimal
    paid_amount: Decimal
    status: str
    min_down_payment: int
    payments: tuple[PaymentSummary, ...] = field(default_factory=tuple)


class BookingReader(Protocol):
    def get_booking_details(self, booking_id, *, lock: bool = False) -> BookingDetails:
        ...


class DjangoBookingReader:
    """Read booking financials straight from the ORM."""

    def get_booking_details(self, booking_id, *, lock: bool = False) -> BookingDetails:
        queryset = Booking.objects.select_related("slot__court")
        if lock:
            queryset = queryset.select_for_update()
        try:
            booking = queryset.get(pk=booking_id)
        except (Booking.DoesNotExist, ValueError):
            raise NotFound(ErrorMessage.BOOKING_NOT_FOUND)

        payments = tuple(
            PaymentSummary(
                id=payment.id,
                payment_amount=payment.payment_amount,
                payment_status=payment.payment_status,
            )
            for payment in booking.payments.order_by("created_at", "id")
        )
        return BookingDetails(
            id=booking.id,
            user_id=booking.user_id,
            total_amount=booking.total_amount,
            paid_amount=booking.paid_amount,
            status=booking.status,
            min_down_payment=booking.slot.court.min_down_payment,
            payments=payments,
        )
