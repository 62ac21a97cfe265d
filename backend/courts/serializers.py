from rest_framework import serializers

from .models import Court, Slot


class CourtSerializer(serializers.ModelSerializer):
    class Meta:
        model = Court
        fields = [
            "id",
            "name",
            "location",
            "description",
            "min_down_payment",
            "is_active",
        ]

    def validate_min_down_payment(self, value: int) -> int:
        if value > 100:
            raise serializers.ValidationError("Minimum down payment is a percentage between 0 and 100.")
        return value


class SlotSerializer(serializers.ModelSerializer):
    is_booked = serializers.SerializerMethodField()

    class Meta:
        model = Slot
        fields = ["id", "court", "start", "end", "price", "is_active", "is_booked"]
        read_only_fields = ["id", "court", "is_booked"]

    def get_is_booked(self, obj) -> bool:
        annotated = getattr(obj, "booking_count", None)
        if annotated is not None:
            return annotated > 0
        return obj.bookings.exists()

    def validate(self, attrs):
        start = attrs.get("start", getattr(self.instance, "start", None))
        end = attrs.get("end", getattr(self.instance, "end", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end": "End time must be after the start time."})
        return attrs
