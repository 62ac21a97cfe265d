import logging
import mimetypes

from django.conf import settings
from PIL import Image, UnidentifiedImageError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsOperator
from bookings.services.booking_reader import DjangoBookingReader
from core.errors import BadRequest, Forbidden
from payments.serializers import (
    PaymentCreateSerializer,
    PaymentSerializer,
    PaymentUpdateSerializer,
    VerificationResultSerializer,
)
from payments.services.records import PaymentRecordManager
from payments.services.uploads import StorageUploadStore
from payments.services.verification import PaymentVerificationWorkflow

logger = logging.getLogger(__name__)


def build_payment_manager() -> PaymentRecordManager:
    return PaymentRecordManager(
        booking_reader=DjangoBookingReader(),
        upload_store=StorageUploadStore(),
    )


def build_verification_workflow() -> PaymentVerificationWorkflow:
    return PaymentVerificationWorkflow()


def _validate_image(image) -> None:
    if image is None:
        raise BadRequest("image file is required.")

    max_bytes = settings.PAYMENT_IMAGE_MAX_BYTES
    if image.size > max_bytes:
        raise BadRequest(f"Image must be {max_bytes // (1024 * 1024)} MB or smaller.")

    content_type = image.content_type or mimetypes.guess_type(image.name)[0]
    if content_type not in PaymentViewSet.ALLOWED_CONTENT_TYPES:
        raise BadRequest("Unsupported file type. Upload PNG, JPEG, or WEBP.")

    try:
        with Image.open(image) as picture:
            picture.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise BadRequest("Uploaded file is not a valid image.")
    finally:
        image.seek(0)


class PaymentViewSet(viewsets.ViewSet):
    """
    Proof-of-payment records.

    Players create and amend payments for their own bookings and attach a proof
    image; operators list payments and verify them.
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    ALLOWED_CONTENT_TYPES = {"image/png", "image/jpeg", "image/webp"}

    def get_permissions(self):
        if self.action in {"list", "verify"}:
            return [IsAuthenticated(), IsOperator()]
        return super().get_permissions()

    def _ensure_can_access(self, request, payment) -> None:
        if getattr(request.user, "is_operator", False):
            return
        if payment.booking.user_id != request.user.id:
            raise Forbidden()

    def list(self, request):
        manager = build_payment_manager()
        status_filter = request.query_params.get("status")
        if status_filter:
            payments = manager.list_by_status(status_filter)
        else:
            payments = manager.list_all()
        return Response(PaymentSerializer(payments, many=True).data)

    def create(self, request):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user_id = None if request.user.is_operator else request.user.id
        payment = build_payment_manager().create(
            data["booking_id"],
            data["payment_amount"],
            data["payment_method"],
            user_id=user_id,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        payment = build_payment_manager().get_by_id(pk)
        self._ensure_can_access(request, payment)
        return Response(PaymentSerializer(payment).data)

    def partial_update(self, request, pk=None):
        manager = build_payment_manager()
        serializer = PaymentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user_id = None if request.user.is_operator else request.user.id
        payment = manager.update(
            pk,
            data["payment_amount"],
            data["payment_method"],
            booking_id=data.get("booking_id"),
            user_id=user_id,
        )
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=["post"], url_path="image")
    def image(self, request, pk=None):
        image = request.FILES.get("image")
        _validate_image(image)

        payment = build_payment_manager().upload_image(pk, request.user.id, image)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="verify")
    def verify(self, request, pk=None):
        result = build_verification_workflow().verify(pk, verified_by=request.user)
        logger.info("Payment %s verified by operator %s", result.payment.id, request.user.id)
        return Response(VerificationResultSerializer(result).data, status=status.HTTP_200_OK)
