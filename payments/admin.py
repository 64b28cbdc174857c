from django.contrib import admin

from .models import Payment, PaymentGateway


@admin.register(PaymentGateway)
class PaymentGatewayAdmin(admin.ModelAdmin):
    list_display = ("id", "label", "plugin", "mode", "merchant_id")
    list_filter = ("plugin", "mode")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "state", "amount", "currency", "remote_id", "remote_state", "created_at", "completed_at")
    search_fields = ("remote_id", "order__id")
    list_filter = ("state", "payment_gateway", "created_at")
    readonly_fields = ("created_at", "updated_at", "completed_at")
