"""Reconciliation of PayTR payment notifications.

One notification is handled per request, in a single transaction that holds
the order row lock from locate-or-create through the final state write, so
duplicate deliveries and the customer's return redirect are serialized per
order.
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from orders.lock import order_lock
from orders.models import Order
from payments.credentials import credentials_for_payment
from payments.models import Payment
from payments.services import MissingPaymentGateway, locate_or_create_payment

from .exceptions import GatewayNotFound, OrderNotFound, UnresolvableOrderId
from .payload import CallbackPayload, require_fields
from .utils import resolve_order_id, verify_hash

logger = logging.getLogger(__name__)

PLACE_TRANSITION = "place"
ORDER_COMPLETED = "completed"


@dataclass(frozen=True)
class ReconcileResult:
    order_id: int
    payment_id: int
    payment_state: str
    signature_valid: bool
    transition_applied: bool = False
    lock_released: bool = False


def resolve_callback_order_id(payload: CallbackPayload) -> int:
    """Order id for ``payload``; shared by the handler and the admission gate."""
    order_id = resolve_order_id(payload.merchant_oid)
    if not order_id or order_id < 1:
        raise UnresolvableOrderId(
            f"Cannot resolve order id from merchant_oid {payload.merchant_oid!r}",
            merchant_oid=payload.merchant_oid,
        )
    return order_id


def handle_callback(payload: CallbackPayload, log=None, lock=None) -> ReconcileResult:
    log = log or logger
    require_fields(payload)
    order_id = resolve_callback_order_id(payload)

    with transaction.atomic():
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found", order_id=order_id, merchant_oid=payload.merchant_oid)
        try:
            payment = locate_or_create_payment(order, log=log)
        except MissingPaymentGateway:
            raise GatewayNotFound(
                f"Order {order_id} has no payment gateway", order_id=order_id, merchant_oid=payload.merchant_oid,
            ) from None
        return reconcile_payment(order, payment, payload, log=log, lock=lock)


def reconcile_payment(order: Order, payment: Payment, payload: CallbackPayload, log=None, lock=None) -> ReconcileResult:
    """Apply a notification to ``payment`` and ``order``.

    Only a verified ``success`` completes the payment and places the order.
    Anything else leaves the payment in ``authorization`` and the order to
    the checkout workflow; it never cancels the order. A completed payment
    is never moved back.
    """
    log = log or logger
    lock = lock or order_lock
    payment = Payment.objects.select_for_update().get(pk=payment.pk)

    creds = credentials_for_payment(payment)
    valid, computed = verify_hash(
        payload.hash, payload.merchant_oid, payload.status, payload.total_amount,
        creds.merchant_salt, creds.merchant_key,
    )
    context = {"order_id": order.pk, "merchant_oid": payload.merchant_oid, "status": payload.status}

    if not valid:
        log.warning(
            "PayTR callback: hash verification failed. Order ID: %s, Calculated: %s, Received: %s",
            order.pk, computed, payload.hash,
            extra={**context, "computed_hash": computed, "received_hash": payload.hash},
        )

    if payload.is_success and valid:
        return _complete(order, payment, payload, log, lock, context)

    log.warning(
        "PayTR callback: payment failed or hash invalid. Order ID: %s, Status: %s, Hash valid: %s",
        order.pk, payload.status, "Yes" if valid else "No",
        extra=context,
    )
    if payment.is_completed:
        log.info("PayTR callback: payment %s already completed, not downgrading. Order ID: %s",
                 payment.pk, order.pk, extra=context)
        return ReconcileResult(order.pk, payment.pk, payment.state, valid)

    payment.state = Payment.STATE_AUTHORIZATION
    if valid:
        payment.remote_id = payload.merchant_oid
        payment.remote_state = payload.status
    payment.save()
    return ReconcileResult(order.pk, payment.pk, payment.state, valid)


def _complete(order, payment, payload, log, lock, context) -> ReconcileResult:
    payment.state = Payment.STATE_COMPLETED
    payment.remote_id = payload.merchant_oid
    payment.remote_state = payload.status
    if payment.completed_at is None:
        payment.completed_at = timezone.now()
    payment.save()

    applied = False
    if order.state != ORDER_COMPLETED:
        if any(t.id == PLACE_TRANSITION for t in order.allowed_transitions()):
            order.apply_transition(PLACE_TRANSITION)
            order.save()
            applied = True
            log.info("PayTR callback: order %s placed, now %s", order.pk, order.state, extra=context)
        else:
            log.info(
                "PayTR callback: transition %r not available for order %s in state %s, leaving order as is",
                PLACE_TRANSITION, order.pk, order.state, extra=context,
            )

    released = False
    if lock.is_locked(order):
        lock.unlock(order)
        released = True
        log.info("PayTR callback: order lock released. Order ID: %s", order.pk, extra=context)

    log.info(
        "PayTR callback: payment recorded. Transaction reference: %s, Order ID: %s",
        payload.merchant_oid, order.pk, extra=context,
    )
    return ReconcileResult(order.pk, payment.pk, payment.state, True, applied, released)
