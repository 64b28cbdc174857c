from django.db import models


class PaymentGateway(models.Model):
    MODE_CHOICES = [("test", "Test"), ("live", "Live")]

    id = models.CharField(max_length=32, primary_key=True)  # machine name, e.g. "paytr"
    label = models.CharField(max_length=64)
    plugin = models.CharField(max_length=32, default="paytr")
    mode = models.CharField(max_length=8, choices=MODE_CHOICES, default="test")

    # blank -> settings.PAYTR
    merchant_id = models.CharField(max_length=32, blank=True, default="")
    merchant_key = models.CharField(max_length=128, blank=True, default="")
    merchant_salt = models.CharField(max_length=128, blank=True, default="")

    def __str__(self):
        return self.label or self.id


class Payment(models.Model):
    STATE_AUTHORIZATION = "authorization"
    STATE_COMPLETED = "completed"
    STATE_CANCELED = "canceled"
    STATE_CHOICES = [
        (STATE_AUTHORIZATION, "Authorization"),
        (STATE_COMPLETED, "Completed"),
        (STATE_CANCELED, "Canceled"),
    ]

    # one-to-one: the unique index is what stops two racing creators
    order = models.OneToOneField("orders.Order", on_delete=models.PROTECT, related_name="payment")
    payment_gateway = models.ForeignKey(PaymentGateway, on_delete=models.PROTECT, related_name="payments")

    state = models.CharField(max_length=16, choices=STATE_CHOICES, default=STATE_AUTHORIZATION, db_index=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="TRY")

    remote_id = models.CharField(max_length=64, blank=True, default="", db_index=True)  # merchant_oid
    remote_state = models.CharField(max_length=32, blank=True, default="")

    completed_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_completed(self) -> bool:
        return self.state == self.STATE_COMPLETED

    def __str__(self):
        return f"Payment#{self.pk} order={self.order_id} {self.state}"
