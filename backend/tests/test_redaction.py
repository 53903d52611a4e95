import copy

from services.redaction import FINANCIAL_FIELDS, redact


def _all_keys(payload):
    keys = set()
    if isinstance(payload, dict):
        for key, value in payload.items():
            keys.add(key)
            keys |= _all_keys(value)
    elif isinstance(payload, list):
        for item in payload:
            keys |= _all_keys(item)
    return keys


def _order_payload(depth=3):
    line_item = {
        "id": 1,
        "productName": "Heavyweight Tee",
        "unitPrice": 12.5,
        "lineTotal": 437.5,
        "actualCost": 6,
        "variant": {"variantCode": "TEE-100-BLK", "msrp": 30, "cost": 8, "basePrice": 12.5},
    }
    payload = {
        "id": 42,
        "orderName": "Spring League Kits",
        "subtotal": 1000,
        "total": 1080,
        "taxAmount": 80,
        "discount": 0,
        "commission": 50,
        "revenue": 1080,
        "amountPaid": 500,
        "invoiceUrl": "https://billing.example.com/inv/42",
        "lineItems": [line_item],
    }
    # nest orders inside line items to check recursion has no fixed depth
    for _ in range(depth):
        payload = {"id": 1, "total": 1, "lineItems": [dict(line_item, lineItems=[payload])]}
    return payload


def test_manufacturer_never_receives_financial_fields():
    redacted = redact(_order_payload(), "manufacturer")

    assert _all_keys(redacted).isdisjoint(FINANCIAL_FIELDS)


def test_manufacturer_keeps_descriptive_fields():
    redacted = redact(_order_payload(depth=0), "manufacturer")

    assert redacted["orderName"] == "Spring League Kits"
    assert redacted["lineItems"][0]["productName"] == "Heavyweight Tee"
    assert redacted["lineItems"][0]["variant"] == {"variantCode": "TEE-100-BLK"}


def test_lists_are_redacted_element_wise():
    payload = [{"id": 1, "total": 10}, {"id": 2, "unitPrice": 3}, "plain"]

    assert redact(payload, "manufacturer") == [{"id": 1}, {"id": 2}, "plain"]


def test_scalars_pass_through():
    assert redact(5, "manufacturer") == 5
    assert redact(None, "manufacturer") is None


def test_role_match_is_case_insensitive():
    assert "total" not in redact({"total": 1}, "Manufacturer")


def test_other_roles_get_the_same_object_back():
    payload = _order_payload()
    snapshot = copy.deepcopy(payload)

    for role in ("admin", "ops", "sales", ""):
        assert redact(payload, role) is payload
    assert payload == snapshot


def test_redaction_does_not_mutate_the_input():
    payload = _order_payload(depth=1)
    snapshot = copy.deepcopy(payload)

    redact(payload, "manufacturer")

    assert payload == snapshot
