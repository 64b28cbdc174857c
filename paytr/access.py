import logging
from functools import wraps

from django.conf import settings
from django.http import HttpResponseForbidden

from orders.models import Order

from .exceptions import UnresolvableOrderId
from .payload import parse_request
from .services import resolve_callback_order_id

logger = logging.getLogger(__name__)


def check_callback_access(request, log=None) -> bool:
    """Admit a callback only if its merchant_oid names an existing order.

    Uses the handler's own parser and resolver so the gate and the handler
    always agree on which order a payload refers to.
    """
    log = log or logger
    payload = parse_request(request)
    if not payload.merchant_oid:
        log.error("PayTR callback: merchant_oid parameter not found.")
        return False

    try:
        order_id = resolve_callback_order_id(payload)
    except UnresolvableOrderId:
        order_id = None
    if order_id and Order.objects.filter(pk=order_id).exists():
        return True

    log.error("PayTR callback: no such order. Order ID: %s", order_id,
              extra={"order_id": order_id, "merchant_oid": payload.merchant_oid})
    return False


def callback_access_required(view):
    @wraps(view)
    def wrapped(request, *args, **kwargs):
        enabled = (getattr(settings, "PAYTR", {}) or {}).get("ACCESS_CHECK", True)
        if enabled and not check_callback_access(request, log=getattr(request, "logger", None)):
            return HttpResponseForbidden("Forbidden", content_type="text/plain")
        return view(request, *args, **kwargs)
    return wrapped
