from __future__ import annotations

import logging
from decimal import Decimal

from django.db import IntegrityError, transaction

from bookings.services.booking_reader import BookingReader
from core.errors import BadRequest, Conflict, Forbidden, NotFound, ServiceError, translate_storage_errors
from core.messages import ErrorMessage
from payments.models import Payment
from payments.rules import is_payment_acceptable
from payments.services.uploads import UploadStore

logger = logging.getLogger(__name__)


class PaymentRecordManager:
    """Create, amend and read payment records against booking financials."""

    def __init__(self, *, booking_reader: BookingReader, upload_store: UploadStore):
        self.booking_reader = booking_reader
        self.upload_store = upload_store

    def _get_payment(self, payment_id, *, for_update: bool = False) -> Payment:
        queryset = Payment.objects.select_related("booking")
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=payment_id)
        except (Payment.DoesNotExist, ValueError):
            raise NotFound(f"Payment with ID {payment_id} not found")

    @translate_storage_errors(ErrorMessage.CREATE_PAYMENT_FAILED)
    def create(self, booking_id, payment_amount: Decimal, payment_method: str, *, user_id=None) -> Payment:
        try:
            with transaction.atomic():
                details = self.booking_reader.get_booking_details(booking_id, lock=True)

                if user_id is not None and details.user_id != user_id:
                    raise Forbidden(ErrorMessage.PAYMENT_BOOKING_FORBIDDEN)

                pending = next(
                    (p for p in details.payments if p.payment_status in Payment.PENDING_STATUSES),
                    None,
                )
                if pending is not None:
                    raise Conflict(ErrorMessage.PAYMENT_ALREADY_PENDING)

                if not is_payment_acceptable(
                    details.total_amount,
                    details.paid_amount,
                    details.min_down_payment,
                    payment_amount,
                ):
                    raise BadRequest(ErrorMessage.PAYMENT_AMOUNT_INVALID)

                payment = Payment.objects.create(
                    booking_id=details.id,
                    payment_amount=payment_amount,
                    payment_method=payment_method,
                    payment_status=Payment.NOT_PAID,
                    payment_image_link="",
                )
        except IntegrityError:
            # lost a race against another create for the same booking
            raise Conflict(ErrorMessage.PAYMENT_ALREADY_PENDING)

        logger.info(
            "Payment %s created for booking %s (amount=%s, method=%s)",
            payment.id,
            booking_id,
            payment_amount,
            payment_method,
        )
        return payment

    @translate_storage_errors(ErrorMessage.UPDATE_PAYMENT_FAILED)
    def update(
        self,
        payment_id,
        payment_amount: Decimal,
        payment_method: str,
        booking_id=None,
        *,
        user_id=None,
    ) -> Payment:
        with transaction.atomic():
            payment = self._get_payment(payment_id, for_update=True)
            if user_id is not None and payment.booking.user_id != user_id:
                raise Forbidden(ErrorMessage.PAYMENT_UPDATE_FORBIDDEN)
            if payment.payment_status == Payment.PAID:
                raise Conflict(ErrorMessage.PAID_PAYMENT_IMMUTABLE)

            if booking_id is not None and str(booking_id) != str(payment.booking_id):
                raise BadRequest(ErrorMessage.PAYMENT_BOOKING_MISMATCH)

            details = self.booking_reader.get_booking_details(payment.booking_id)
            if not is_payment_acceptable(
                details.total_amount,
                details.paid_amount,
                details.min_down_payment,
                payment_amount,
            ):
                raise Conflict(ErrorMessage.PAYMENT_AMOUNT_INVALID)

            payment.payment_amount = payment_amount
            payment.payment_method = payment_method
            payment.save(update_fields=["payment_amount", "payment_method", "updated_at"])

        logger.info("Payment %s updated (amount=%s, method=%s)", payment.id, payment_amount, payment_method)
        return payment

    @translate_storage_errors(ErrorMessage.FETCH_PAYMENTS_FAILED)
    def list_all(self):
        return list(Payment.objects.select_related("booking").order_by("-created_at", "id"))

    @translate_storage_errors(ErrorMessage.FETCH_PAYMENTS_FAILED)
    def list_by_status(self, status: str):
        if status not in dict(Payment.STATUSES):
            raise BadRequest(ErrorMessage.PAYMENT_STATUS_INVALID)
        return list(
            Payment.objects.select_related("booking")
            .filter(payment_status=status)
            .order_by("-created_at", "id")
        )

    @translate_storage_errors(ErrorMessage.FETCH_PAYMENT_FAILED)
    def get_by_id(self, payment_id) -> Payment:
        """
        Return the payment with its image reference swapped for a retrievable URL.

        The swap only touches the returned instance; the stored reference is
        left as it is.
        """
        payment = self._get_payment(payment_id)
        if payment.payment_image_link:
            payment.payment_image_link = self.upload_store.get_file_url(payment.payment_image_link)
        return payment

    @translate_storage_errors(ErrorMessage.UPLOAD_IMAGE_FAILED)
    def upload_image(self, payment_id, uploader_id, image) -> Payment:
        """
        Store a proof image and move the payment to ``verification_pending``.

        The file is stored before the row is locked. If the locked write fails
        the new file is removed again; on success the image it replaces is
        removed.
        """
        payment = self._get_payment(payment_id)
        if payment.booking.user_id != uploader_id:
            logger.warning(
                "User %s tried to upload a payment image for booking %s",
                uploader_id,
                payment.booking_id,
            )
            raise Forbidden(ErrorMessage.PAYMENT_UPLOAD_FORBIDDEN)
        if payment.payment_status == Payment.PAID:
            raise Conflict(ErrorMessage.PAID_PAYMENT_IMMUTABLE)

        stored = self.upload_store.upload_file(image)

        try:
            with transaction.atomic():
                payment = self._get_payment(payment_id, for_update=True)
                if payment.payment_status == Payment.PAID:
                    raise Conflict(ErrorMessage.PAID_PAYMENT_IMMUTABLE)
                previous = payment.payment_image_link
                payment.payment_image_link = stored.filename
                payment.payment_status = Payment.VERIFICATION_PENDING
                payment.save(update_fields=["payment_image_link", "payment_status", "updated_at"])
        except Exception:
            self._discard_file(stored.filename)
            raise

        if previous and previous != stored.filename:
            self._discard_file(previous)

        logger.info("Payment %s image uploaded; awaiting verification", payment.id)
        return payment

    def _discard_file(self, filename: str) -> None:
        # best effort; the store has already logged the failure
        try:
            self.upload_store.delete_file(filename)
        except ServiceError as exc:
            logger.warning("Could not remove stored file %s: %s", filename, exc.detail or exc.message)
