"""Merchant order id decoding and notification signatures for PayTR."""

import base64, hashlib, hmac, re

ORDER_PREFIX = "SP"
SUFFIX_DELIMITER = "DR"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def build_merchant_oid(order_id: int, suffix: str = "") -> str:
    """Build the merchant order id sent to PayTR when the order is placed."""
    oid = f"{ORDER_PREFIX}{order_id}"
    return f"{oid}{SUFFIX_DELIMITER}{suffix}" if suffix else oid


def resolve_order_id(merchant_oid: str | None) -> int | None:
    """Decode the internal order id from a ``merchant_oid``.

    ``"SP1024DR0001"`` -> ``1024``. Everything from the first ``"DR"`` on is
    dropped and every ``"SP"`` removed; the rest is read as a leading integer.
    A remainder with no leading digits gives ``0``, which callers must treat
    as unresolvable. Returns ``None`` for an empty ``merchant_oid``.
    """
    if not merchant_oid:
        return None
    head = merchant_oid.split(SUFFIX_DELIMITER, 1)[0].replace(ORDER_PREFIX, "")
    match = _LEADING_INT.match(head)
    return int(match.group(1)) if match else 0


def make_hash(merchant_oid: str, status: str, total_amount: str, merchant_salt: str, merchant_key: str) -> str:
    """base64(HMAC-SHA256(key, merchant_oid + salt + status + total_amount))."""
    msg = f"{merchant_oid}{merchant_salt}{status}{total_amount}".encode()
    digest = hmac.new(merchant_key.encode(), msg, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def verify_hash(received_hash: str | None, merchant_oid: str, status: str, total_amount: str | None,
                merchant_salt: str, merchant_key: str) -> tuple[bool, str]:
    """Check ``received_hash`` in constant time.

    Returns ``(valid, computed_hash)`` so callers can log both on mismatch.
    """
    computed = make_hash(merchant_oid, status, total_amount or "", merchant_salt, merchant_key)
    valid = hmac.compare_digest(computed.encode(), (received_hash or "").encode())
    return valid, computed
