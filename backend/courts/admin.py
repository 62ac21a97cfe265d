from django.contrib import admin

from .models import Court, Slot


class SlotInline(admin.TabularInline):
    model = Slot
    extra = 0


@admin.register(Court)
class CourtAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "min_down_payment", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "location")
    inlines = [SlotInline]


@admin.register(Slot)
class SlotAdmin(admin.ModelAdmin):
    list_display = ("court", "start", "end", "price", "is_active")
    list_filter = ("is_active", "court")
