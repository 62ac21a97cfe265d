from rest_framework import serializers

from bookings.models import Booking
from courts.models import Slot


class BookingPaymentSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    payment_amount = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    payment_method = serializers.CharField(read_only=True)
    payment_status = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class BookingSlotSerializer(serializers.ModelSerializer):
    court_id = serializers.IntegerField(source="court.id", read_only=True)
    court_name = serializers.CharField(source="court.name", read_only=True)
    min_down_payment = serializers.IntegerField(source="court.min_down_payment", read_only=True)

    class Meta:
        model = Slot
        fields = ["id", "court_id", "court_name", "min_down_payment", "start", "end", "price"]


class BookingSerializer(serializers.ModelSerializer):
    slot = BookingSlotSerializer(read_only=True)
    remaining_amount = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "user",
            "slot",
            "total_amount",
            "paid_amount",
            "remaining_amount",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class BookingDetailSerializer(BookingSerializer):
    payments = BookingPaymentSerializer(many=True, read_only=True)

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["payments"]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    slot_id = serializers.PrimaryKeyRelatedField(
        queryset=Slot.objects.filter(is_active=True, court__is_active=True),
        source="slot",
    )
