from typing import Sequence

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..errors import StockError
from ..models.product import Product
from ..utils.validators import CartLine
from .catalog_service import CatalogService
from .pricing import requested_quantities


class StockLedger:
    """Conditional stock decrements inside the caller's transaction.

    Reserving and decrementing are the same statement, so there is nothing to
    release: rolling back the enclosing unit of work restores the stock.
    """

    def __init__(self, session: Session):
        self._session = session

    def reserve(self, lines: Sequence[CartLine]) -> None:
        # fixed product order keeps lock acquisition consistent between placements
        for product_id, quantity in sorted(requested_quantities(lines).items()):
            stmt = (
                update(Product)
                .where(Product.id == product_id, Product.stock >= quantity)
                .values(stock=Product.stock - quantity)
                .execution_options(synchronize_session=False)
            )
            result = self._session.execute(stmt)
            if result.rowcount != 1:
                self._raise_shortage(product_id)

    def _raise_shortage(self, product_id: str) -> None:
        name = self._session.query(Product.name).filter(Product.id == product_id).scalar()
        available = CatalogService(self._session).current_stock(product_id)
        raise StockError(product_id, name or product_id, available)
