"""Merchant credentials for signing and verifying PayTR notifications."""

import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MerchantCredentials:
    merchant_id: str
    merchant_key: str
    merchant_salt: str


def get_credentials(gateway) -> MerchantCredentials:
    """Return the credentials for ``gateway`` (a ``PaymentGateway``).

    Blank fields on the gateway row fall back to ``settings.PAYTR``. A
    missing key or salt raises :class:`ImproperlyConfigured`: a callback must
    never be verified against an empty secret.
    """
    defaults = getattr(settings, "PAYTR", {}) or {}
    creds = MerchantCredentials(
        merchant_id=gateway.merchant_id or defaults.get("MERCHANT_ID", ""),
        merchant_key=gateway.merchant_key or defaults.get("MERCHANT_KEY", ""),
        merchant_salt=gateway.merchant_salt or defaults.get("MERCHANT_SALT", ""),
    )
    if not (creds.merchant_key and creds.merchant_salt):
        logger.error("PayTR merchant key/salt missing for payment gateway %s", gateway.pk)
        raise ImproperlyConfigured(
            f"PayTR merchant key and salt are required for payment gateway {gateway.pk!r}"
        )
    return creds


def credentials_for_payment(payment) -> MerchantCredentials:
    return get_credentials(payment.payment_gateway)
