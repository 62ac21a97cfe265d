from django.db.models import Count, ProtectedError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsOperatorOrReadOnly
from core.errors import Conflict
from core.messages import ErrorMessage

from .models import Court, Slot
from .serializers import CourtSerializer, SlotSerializer


class CourtViewSet(viewsets.ModelViewSet):
    serializer_class = CourtSerializer
    permission_classes = [IsOperatorOrReadOnly]
    filterset_fields = ["location", "is_active"]
    search_fields = ["name", "location", "description"]
    ordering_fields = ["name", "min_down_payment"]

    def get_queryset(self):
        queryset = Court.objects.all().order_by("name")
        user = self.request.user
        if not getattr(user, "is_operator", False):
            queryset = queryset.filter(is_active=True)
        return queryset

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError:
            raise Conflict(ErrorMessage.COURT_HAS_BOOKINGS)

    @action(detail=True, methods=["get", "post"], url_path="slots")
    def slots(self, request, pk=None):
        court = self.get_object()

        if request.method.lower() == "get":
            slots = (
                court.slots.filter(is_active=True)
                .annotate(booking_count=Count("bookings"))
                .order_by("start")
            )
            serializer = SlotSerializer(slots, many=True)
            return Response(serializer.data)

        serializer = SlotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if Slot.objects.filter(
            court=court,
            start=serializer.validated_data["start"],
            end=serializer.validated_data["end"],
        ).exists():
            return Response(
                {"detail": "A slot with these times already exists for this court."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        slot = serializer.save(court=court)
        return Response(SlotSerializer(slot).data, status=status.HTTP_201_CREATED)
