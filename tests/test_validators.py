"""Tests for placement request validation."""

import json

import pytest

from ordering.errors import ValidationError
from ordering.utils.validators import CartLine, PlacementRequest, normalize_cart, validate_shipping

from conftest import SHIPPING


class TestValidateShipping:
    def test_trims_values(self):
        payload = {k: f"  {v}  " for k, v in SHIPPING.items()}
        details = validate_shipping(payload)
        assert details.to_dict() == SHIPPING

    def test_missing_field_lists_it(self):
        payload = dict(SHIPPING)
        del payload["pincode"]
        with pytest.raises(ValidationError) as exc:
            validate_shipping(payload)
        assert "complete shipping details" in str(exc.value)
        assert exc.value.fields == ["pincode"]

    def test_whitespace_only_counts_as_missing(self):
        payload = dict(SHIPPING, phone="   ", city="")
        with pytest.raises(ValidationError) as exc:
            validate_shipping(payload)
        assert set(exc.value.fields) == {"phone", "city"}

    def test_numeric_pincode_is_accepted(self):
        details = validate_shipping(dict(SHIPPING, pincode=560001))
        assert details.pincode == "560001"


class TestNormalizeCart:
    def test_storefront_shape(self):
        lines = normalize_cart(
            [{"product": {"id": "p1", "images": [{"url": "https://img/1.png"}]}, "quantity": 2}]
        )
        assert lines == [CartLine(product_id="p1", quantity=2, image="https://img/1.png")]

    def test_flat_shape(self):
        lines = normalize_cart([{"product_id": "p2", "quantity": 1}])
        assert lines == [CartLine(product_id="p2", quantity=1, image="")]

    def test_json_text(self):
        text = json.dumps([{"product": {"id": "p1"}, "quantity": 3}])
        assert normalize_cart(text) == [CartLine(product_id="p1", quantity=3)]

    @pytest.mark.parametrize("raw", [None, [], "", "[]"])
    def test_empty_cart(self, raw):
        with pytest.raises(ValidationError, match="No items in cart"):
            normalize_cart(raw)

    def test_unparseable_text(self):
        with pytest.raises(ValidationError, match="not valid JSON"):
            normalize_cart("[{oops")

    @pytest.mark.parametrize("raw", [{"product_id": "p1"}, 42, '{"product_id": "p1"}'])
    def test_non_list(self, raw):
        with pytest.raises(ValidationError, match="must be a list"):
            normalize_cart(raw)

    @pytest.mark.parametrize(
        "entry",
        [
            "p1",
            {"quantity": 1},
            {"product": {"id": ""}, "quantity": 1},
            {"product_id": "p1", "quantity": 0},
            {"product_id": "p1", "quantity": -2},
            {"product_id": "p1", "quantity": 1.5},
            {"product_id": "p1", "quantity": "2"},
            {"product_id": "p1", "quantity": True},
        ],
    )
    def test_malformed_entries_fail_closed(self, entry):
        with pytest.raises(ValidationError):
            normalize_cart([entry])


class TestPlacementRequest:
    def test_from_payload(self):
        payload = dict(SHIPPING, orderedItems=[{"product_id": "p1", "quantity": 2}])
        req = PlacementRequest.from_payload(payload)
        assert req.shipping.full_name == "Asha Rao"
        assert req.lines == [CartLine("p1", 2)]

    def test_shipping_checked_before_cart(self):
        with pytest.raises(ValidationError, match="shipping"):
            PlacementRequest.from_payload({"orderedItems": "not json"})

    def test_rejects_non_object(self):
        with pytest.raises(ValidationError):
            PlacementRequest.from_payload(["nope"])
