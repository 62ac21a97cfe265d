from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Payment(models.Model):
    """A proof-of-payment submitted against a booking and reviewed by an operator."""

    NOT_PAID = "not_paid"
    VERIFICATION_PENDING = "verification_pending"
    PAID = "paid"
    STATUSES = [
        (NOT_PAID, "Not paid"),
        (VERIFICATION_PENDING, "Verification pending"),
        (PAID, "Paid"),
    ]
    PENDING_STATUSES = (NOT_PAID, VERIFICATION_PENDING)

    BANK_TRANSFER = "bank_transfer"
    MOBILE_WALLET = "mobile_wallet"
    CASH_DEPOSIT = "cash_deposit"
    METHODS = [
        (BANK_TRANSFER, "Bank transfer"),
        (MOBILE_WALLET, "Mobile wallet"),
        (CASH_DEPOSIT, "Cash deposit"),
    ]

    booking = models.ForeignKey("bookings.Booking", on_delete=models.CASCADE, related_name="payments")
    payment_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    payment_method = models.CharField(max_length=20, choices=METHODS)
    payment_status = models.CharField(max_length=24, choices=STATUSES, default=NOT_PAID)
    payment_image_link = models.CharField(max_length=255, blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=models.Q(payment_status__in=["not_paid", "verification_pending"]),
                name="one_pending_payment_per_booking",
            ),
        ]

    def __str__(self):
        return f"Payment #{self.pk} {self.payment_amount} ({self.payment_status})"

    @property
    def is_pending(self) -> bool:
        return self.payment_status in self.PENDING_STATUSES

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PAID
