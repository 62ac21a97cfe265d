from decimal import Decimal

from rest_framework import serializers

from bookings.serializers import BookingSerializer
from payments.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    booking_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking_id",
            "payment_amount",
            "payment_method",
            "payment_status",
            "payment_image_link",
            "verified_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    payment_amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    payment_method = serializers.ChoiceField(choices=Payment.METHODS)


class PaymentUpdateSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField(required=False)
    payment_amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    payment_method = serializers.ChoiceField(choices=Payment.METHODS)


class VerificationResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    payment = PaymentSerializer()
    booking = BookingSerializer()
