from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "slot", "total_amount", "paid_amount", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("user__email", "slot__court__name")
    readonly_fields = ("paid_amount", "status")
