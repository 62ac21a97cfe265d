from decimal import Decimal

from django.conf import settings
from django.db import models


class Booking(models.Model):
    """Reservation of a single court slot by a player."""

    NOT_CONFIRMED = "not_confirmed"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    STATUSES = [
        (NOT_CONFIRMED, "Not confirmed"),
        (CONFIRMED, "Confirmed"),
        (COMPLETED, "Completed"),
    ]
    # status only ever moves forward along this order
    STATUS_RANK = {
        NOT_CONFIRMED: 0,
        CONFIRMED: 1,
        COMPLETED: 2,
    }

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    slot = models.ForeignKey("courts.Slot", on_delete=models.PROTECT, related_name="bookings")
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=STATUSES, default=NOT_CONFIRMED)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["slot"], name="one_booking_per_slot"),
        ]

    def __str__(self):
        return f"Booking #{self.pk} ({self.status})"

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount

    @property
    def is_fully_paid(self) -> bool:
        return self.paid_amount >= self.total_amount
