"""Boundary validation for order placement requests.

Everything that enters the placement workflow passes through here first, so
the services below can rely on typed, trimmed values.
"""

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from ..errors import ValidationError


SHIPPING_FIELDS = ("full_name", "state", "city", "country", "address", "pincode", "phone")


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int
    image: str = ""


@dataclass(frozen=True)
class ShippingDetails:
    full_name: str
    state: str
    city: str
    country: str
    address: str
    pincode: str
    phone: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class PlacementRequest:
    shipping: ShippingDetails
    lines: List[CartLine]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PlacementRequest":
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be an object.")
        shipping = validate_shipping(payload)
        lines = normalize_cart(payload.get("orderedItems"))
        return cls(shipping=shipping, lines=lines)


def ensure_positive_int(value: Any, field: str) -> int:
    # bool is an int subclass; True must not pass as quantity 1
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field} must be a positive integer", fields=[field])
    return value


def validate_shipping(payload: Dict[str, Any]) -> ShippingDetails:
    values = {}
    missing = []
    for name in SHIPPING_FIELDS:
        raw = payload.get(name)
        text = raw.strip() if isinstance(raw, str) else ("" if raw is None else str(raw).strip())
        if not text:
            missing.append(name)
        values[name] = text
    if missing:
        raise ValidationError("Please provide complete shipping details.", fields=missing)
    return ShippingDetails(**values)


def _first_image_url(product: Dict[str, Any]) -> str:
    images = product.get("images")
    if isinstance(images, list) and images and isinstance(images[0], dict):
        url = images[0].get("url")
        if isinstance(url, str):
            return url
    return ""


def _to_cart_line(entry: Any, index: int) -> CartLine:
    if not isinstance(entry, dict):
        raise ValidationError(f"Cart item #{index + 1} must be an object.")
    product = entry.get("product")
    if isinstance(product, dict):
        product_id = product.get("id")
        image = _first_image_url(product)
    else:
        product_id = entry.get("product_id")
        image = entry.get("image") if isinstance(entry.get("image"), str) else ""
    if not isinstance(product_id, str) or not product_id.strip():
        raise ValidationError(f"Cart item #{index + 1} is missing a product id.")
    quantity = ensure_positive_int(entry.get("quantity"), f"Cart item #{index + 1} quantity")
    return CartLine(product_id=product_id.strip(), quantity=quantity, image=image)


def normalize_cart(raw: Optional[Any]) -> List[CartLine]:
    """Turn a list (or JSON text holding a list) of cart entries into CartLines."""
    items = raw
    if raw is None:
        items = []
    elif isinstance(raw, str):
        text = raw.strip()
        try:
            items = json.loads(text) if text else []
        except ValueError:
            raise ValidationError("Cart payload is not valid JSON.")
    if not isinstance(items, list):
        raise ValidationError("Cart payload must be a list.")
    if not items:
        raise ValidationError("No items in cart.")
    return [_to_cart_line(entry, i) for i, entry in enumerate(items)]
