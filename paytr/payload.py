"""Parsing of PayTR notification bodies.

PayTR posts either a JSON document or URL-encoded form fields. JSON is tried
first; anything that does not decode to a non-empty object falls back to the
form fields of the same request.
"""

import json
from dataclasses import dataclass

from .exceptions import MissingField

FIELDS = ("merchant_oid", "status", "hash", "total_amount")


@dataclass(frozen=True)
class CallbackPayload:
    merchant_oid: str | None
    status: str | None
    hash: str | None
    total_amount: str | None
    source: str  # "json" or "form"

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def missing_fields(self) -> list:
        # merchant_oid="" is present but unresolvable; the resolver reports it
        missing = [] if self.merchant_oid is not None else ["merchant_oid"]
        return missing + [f for f in ("status", "hash") if not getattr(self, f)]


def _as_text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else ""
    return value if isinstance(value, str) else str(value)


def _json_object(body: bytes):
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) and data else None


def parse_callback_payload(body: bytes, form=None) -> CallbackPayload:
    data = _json_object(body or b"")
    if data is not None:
        return CallbackPayload(**{f: _as_text(data.get(f)) for f in FIELDS}, source="json")
    form = form if form is not None else {}
    return CallbackPayload(**{f: form.get(f) for f in FIELDS}, source="form")


def parse_request(request) -> CallbackPayload:
    return parse_callback_payload(request.body, request.POST)


def require_fields(payload: CallbackPayload) -> CallbackPayload:
    missing = payload.missing_fields()
    if missing:
        raise MissingField(
            f"Missing callback fields: {', '.join(missing)}",
            merchant_oid=payload.merchant_oid, status=payload.status, missing=missing,
        )
    return payload
