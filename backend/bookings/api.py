import logging

from django.db import IntegrityError, transaction
from rest_framework import mixins, status, viewsets
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from bookings.models import Booking
from bookings.serializers import (
    BookingCreateSerializer,
    BookingDetailSerializer,
    BookingSerializer,
)
from core.errors import Conflict
from core.messages import ErrorMessage
from courts.models import Slot

logger = logging.getLogger(__name__)


class BookingPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = BookingSerializer
    pagination_class = BookingPagination
    filterset_fields = ["status"]
    ordering_fields = ["created_at", "total_amount"]

    def get_queryset(self):
        queryset = Booking.objects.select_related("slot__court").order_by("-created_at", "id")
        if self.action == "retrieve":
            queryset = queryset.prefetch_related("payments")
        user = self.request.user
        if getattr(user, "is_operator", False):
            return queryset
        return queryset.filter(user=user)

    def get_serializer_class(self):
        if self.action == "retrieve":
            return BookingDetailSerializer
        if self.action == "create":
            return BookingCreateSerializer
        return super().get_serializer_class()

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        slot_id = serializer.validated_data["slot"].pk

        try:
            with transaction.atomic():
                slot = Slot.objects.select_for_update().select_related("court").get(pk=slot_id)
                if slot.bookings.exists():
                    raise Conflict(ErrorMessage.SLOT_ALREADY_BOOKED)
                booking = Booking.objects.create(
                    user=request.user,
                    slot=slot,
                    total_amount=slot.price,
                )
        except IntegrityError:
            raise Conflict(ErrorMessage.SLOT_ALREADY_BOOKED)

        logger.info(
            "Booking %s created for slot %s by user %s (total=%s)",
            booking.id,
            slot.id,
            request.user.id,
            booking.total_amount,
        )
        output = BookingDetailSerializer(booking)
        return Response(output.data, status=status.HTTP_201_CREATED)
