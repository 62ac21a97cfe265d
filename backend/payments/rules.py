from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Union

from bookings.models import Booking

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, str]


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def down_payment_threshold(total_amount: Amount, min_down_payment_pct: int) -> Decimal:
    """Smallest first payment a booking accepts, given the court's percentage."""
    return _to_decimal(min_down_payment_pct) * _to_decimal(total_amount) / Decimal(100)


def is_payment_acceptable(
    total_amount: Amount,
    paid_amount: Amount,
    min_down_payment_pct: int,
    payment_amount: Amount,
) -> bool:
    """
    Decide whether a proposed payment fits the booking's current financials.

    A fully paid booking takes no more payments, the first payment must reach the
    court's down-payment threshold, and no payment may exceed the remaining balance.
    """
    total = _to_decimal(total_amount)
    paid = _to_decimal(paid_amount)
    amount = _to_decimal(payment_amount)

    remaining = total - paid
    threshold = down_payment_threshold(total, min_down_payment_pct)

    if paid >= total:
        logger.info("Payment rejected: booking is already fully paid")
        return False

    if amount <= 0:
        logger.info("Payment rejected: amount %s is not positive", amount)
        return False

    if remaining == total and amount < threshold:
        logger.info("Payment rejected: first payment must meet the minimum threshold %s", threshold)
        return False

    if amount > remaining:
        logger.info("Payment rejected: amount %s exceeds the remaining balance %s", amount, remaining)
        return False

    return True


def resolve_booking_status(
    total_amount: Amount,
    paid_amount: Amount,
    min_down_payment_pct: int,
    current_status: str,
) -> Optional[str]:
    """
    Return the status a booking should move to after its paid amount changed,
    or None when it stays where it is.
    """
    total = _to_decimal(total_amount)
    paid = _to_decimal(paid_amount)
    min_down_payment = down_payment_threshold(total, min_down_payment_pct)

    updated_status = None
    if paid >= total and current_status != Booking.COMPLETED:
        updated_status = Booking.COMPLETED
    elif paid >= min_down_payment and current_status != Booking.CONFIRMED:
        updated_status = Booking.CONFIRMED

    if updated_status is None:
        return None
    current_rank = Booking.STATUS_RANK.get(current_status, 0)
    if Booking.STATUS_RANK[updated_status] <= current_rank:
        return None
    return updated_status
