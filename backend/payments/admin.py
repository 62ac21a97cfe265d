from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "booking",
        "payment_amount",
        "payment_method",
        "payment_status",
        "verified_at",
        "created_at",
    )
    list_filter = ("payment_status", "payment_method")
    search_fields = ("booking__id", "booking__user__email")
    readonly_fields = ("payment_status", "payment_image_link", "verified_at", "verified_by")

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return self.readonly_fields
        if obj.is_paid:
            # verified amounts are already rolled into the booking
            return [field.name for field in obj._meta.fields]
        return (*self.readonly_fields, "booking")
