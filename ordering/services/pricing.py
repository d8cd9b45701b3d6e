"""Cart pricing: per-line snapshots, tax, shipping and the rounded grand total."""

from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Sequence

from ..errors import NotFoundError, StockError
from ..models.product import Product
from ..utils.validators import CartLine


@dataclass(frozen=True)
class PricingPolicy:
    tax_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: Decimal = Decimal("50")
    flat_shipping_fee: Decimal = Decimal("2")

    def shipping_for(self, subtotal: Decimal) -> Decimal:
        return Decimal("0") if subtotal >= self.free_shipping_threshold else self.flat_shipping_fee


DEFAULT_POLICY = PricingPolicy()


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    quantity: int
    unit_price: Decimal
    title: str
    image: str

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Quote:
    subtotal: Decimal
    tax_rate: Decimal
    shipping_price: Decimal
    total_price: Decimal
    lines: List[PricedLine]


def round_half_up(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def requested_quantities(lines: Sequence[CartLine]) -> Dict[str, int]:
    totals: Dict[str, int] = defaultdict(int)
    for line in lines:
        totals[line.product_id] += line.quantity
    return dict(totals)


def price_cart(
    lines: Sequence[CartLine],
    products: Mapping[str, Product],
    policy: PricingPolicy = DEFAULT_POLICY,
) -> Quote:
    """Price ``lines`` against the resolved ``products``.

    Duplicate lines for one product are checked against stock as a single
    request. Unit prices are copied from the product rows so later catalog
    edits never change a placed order.
    """
    for product_id, wanted in requested_quantities(lines).items():
        product = products.get(product_id)
        if product is None:
            raise NotFoundError(f"Product not found for ID: {product_id}")
        if wanted > int(product.stock):
            raise StockError(product.id, product.name, int(product.stock))

    priced = []
    subtotal = Decimal("0")
    for line in lines:
        product = products[line.product_id]
        unit_price = Decimal(str(product.price))
        pl = PricedLine(
            product_id=product.id,
            quantity=line.quantity,
            unit_price=unit_price,
            title=product.name,
            image=line.image,
        )
        subtotal += pl.line_total
        priced.append(pl)

    shipping = policy.shipping_for(subtotal)
    total = round_half_up(subtotal + subtotal * policy.tax_rate + shipping)
    return Quote(
        subtotal=subtotal,
        tax_rate=policy.tax_rate,
        shipping_price=shipping,
        total_price=total,
        lines=priced,
    )
