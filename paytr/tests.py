import base64, hashlib, hmac, json

from django.http import QueryDict
from django.test import SimpleTestCase

from .exceptions import MissingField, UnresolvableOrderId
from .payload import parse_callback_payload, require_fields
from .services import resolve_callback_order_id
from .utils import build_merchant_oid, make_hash, resolve_order_id, verify_hash


class ResolveOrderIdTests(SimpleTestCase):
    def test_prefix_and_suffix_are_stripped(self):
        self.assertEqual(resolve_order_id("SP1024DR0001"), 1024)

    def test_without_suffix(self):
        self.assertEqual(resolve_order_id("SP77"), 77)

    def test_only_text_before_first_delimiter_is_used(self):
        self.assertEqual(resolve_order_id("SP5DR9DR12"), 5)

    def test_every_marker_is_removed(self):
        self.assertEqual(resolve_order_id("SP1SP2DRSP3"), 12)

    def test_empty_is_unresolved(self):
        self.assertIsNone(resolve_order_id(""))
        self.assertIsNone(resolve_order_id(None))

    def test_non_numeric_remainder_is_zero(self):
        self.assertEqual(resolve_order_id("SPabcDR1"), 0)
        self.assertEqual(resolve_order_id("DR1024"), 0)

    def test_leading_digits_are_kept(self):
        self.assertEqual(resolve_order_id("SP42abcDR1"), 42)

    def test_build_merchant_oid_round_trips(self):
        for order_id in (1, 1024, 987654321):
            self.assertEqual(resolve_order_id(build_merchant_oid(order_id, "0001")), order_id)
            self.assertEqual(resolve_order_id(build_merchant_oid(order_id)), order_id)

    def test_zero_is_unresolvable_for_callers(self):
        payload = parse_callback_payload(json.dumps({"merchant_oid": "SPxyz", "status": "success", "hash": "h"}).encode())
        with self.assertRaises(UnresolvableOrderId):
            resolve_callback_order_id(payload)


class SignatureTests(SimpleTestCase):
    fields = {"merchant_oid": "SP1024DR0001", "status": "success", "total_amount": "150.00"}
    salt = "salt-value"
    key = "key-value"

    def _hash(self, **overrides):
        f = {**self.fields, "merchant_salt": self.salt, "merchant_key": self.key, **overrides}
        return make_hash(f["merchant_oid"], f["status"], f["total_amount"], f["merchant_salt"], f["merchant_key"])

    def test_hash_is_base64_hmac_sha256_of_concatenated_fields(self):
        expected = base64.b64encode(
            hmac.new(b"key-value", b"SP1024DR0001salt-valuesuccess150.00", hashlib.sha256).digest()
        ).decode()
        self.assertEqual(self._hash(), expected)

    def test_round_trip_verifies(self):
        valid, computed = verify_hash(self._hash(), "SP1024DR0001", "success", "150.00", self.salt, self.key)
        self.assertTrue(valid)
        self.assertEqual(computed, self._hash())

    def test_single_character_mutation_fails(self):
        received = self._hash()
        mutations = [
            ("SP1024DR0002", "success", "150.00", self.salt, self.key),
            ("SP1024DR0001", "successs", "150.00", self.salt, self.key),
            ("SP1024DR0001", "success", "150.01", self.salt, self.key),
            ("SP1024DR0001", "success", "150.00", self.salt + "x", self.key),
            ("SP1024DR0001", "success", "150.00", self.salt, self.key[:-1] + "X"),
        ]
        for args in mutations:
            with self.subTest(args=args):
                valid, _ = verify_hash(received, *args)
                self.assertFalse(valid)

    def test_missing_total_amount_signs_as_empty_string(self):
        received = self._hash(total_amount="")
        valid, _ = verify_hash(received, "SP1024DR0001", "success", None, self.salt, self.key)
        self.assertTrue(valid)

    def test_missing_or_non_ascii_received_hash_is_invalid(self):
        self.assertFalse(verify_hash(None, "SP1", "success", "1", self.salt, self.key)[0])
        self.assertFalse(verify_hash("héllo", "SP1", "success", "1", self.salt, self.key)[0])


class PayloadParserTests(SimpleTestCase):
    def test_json_body(self):
        body = json.dumps({"merchant_oid": "SP1DR1", "status": "success", "hash": "abc", "total_amount": "10.00"})
        payload = parse_callback_payload(body.encode())
        self.assertEqual(payload.source, "json")
        self.assertEqual(payload.merchant_oid, "SP1DR1")
        self.assertEqual(payload.total_amount, "10.00")
        self.assertTrue(payload.is_success)

    def test_json_numbers_become_text(self):
        payload = parse_callback_payload(b'{"merchant_oid": "SP1", "status": "success", "hash": "h", "total_amount": 15000}')
        self.assertEqual(payload.total_amount, "15000")

    def test_falls_back_to_form_fields(self):
        form = QueryDict("merchant_oid=SP2DR1&status=failed&hash=xyz&total_amount=5.00")
        payload = parse_callback_payload(b"merchant_oid=SP2DR1&status=failed", form)
        self.assertEqual(payload.source, "form")
        self.assertEqual(payload.merchant_oid, "SP2DR1")
        self.assertEqual(payload.status, "failed")
        self.assertFalse(payload.is_success)

    def test_empty_json_object_falls_back_to_form(self):
        payload = parse_callback_payload(b"{}", QueryDict("merchant_oid=SP3"))
        self.assertEqual(payload.source, "form")
        self.assertEqual(payload.merchant_oid, "SP3")

    def test_missing_fields_raise(self):
        payload = parse_callback_payload(b'{"merchant_oid": "SP1", "status": "success"}')
        with self.assertRaises(MissingField) as cm:
            require_fields(payload)
        self.assertEqual(cm.exception.context["missing"], ["hash"])

    def test_absent_merchant_oid_is_missing(self):
        payload = parse_callback_payload(b'{"status": "success", "hash": "h"}')
        with self.assertRaises(MissingField):
            require_fields(payload)

    def test_empty_merchant_oid_is_left_to_resolver(self):
        payload = parse_callback_payload(b'{"merchant_oid": "", "status": "success", "hash": "h"}')
        self.assertIs(require_fields(payload), payload)

    def test_total_amount_is_optional(self):
        payload = parse_callback_payload(b'{"merchant_oid": "SP1", "status": "success", "hash": "h"}')
        self.assertIsNone(require_fields(payload).total_amount)
