from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "state", "workflow", "total_price", "currency", "locked", "placed_at", "created_at")
    list_filter = ("state", "workflow", "locked", "created_at")
    readonly_fields = ("placed_at", "created_at", "updated_at")
    ordering = ("-created_at",)
