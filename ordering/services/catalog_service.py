from typing import Dict, Iterable

from sqlalchemy.orm import Session

from ..models.product import Product


class CatalogService:
    """Read-only product lookup used by the placement workflow.

    The lookup runs inside the caller's unit of work. With ``lock=True`` the
    rows are selected ``FOR UPDATE`` so concurrent placements touching the
    same products serialize; backends without row locks (SQLite) ignore it
    and rely on the conditional stock decrement instead.
    """

    def __init__(self, session: Session):
        self._session = session

    def lookup(self, product_ids: Iterable[str], *, lock: bool = False) -> Dict[str, Product]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        q = self._session.query(Product).filter(Product.id.in_(ids)).order_by(Product.id)
        if lock:
            q = q.with_for_update()
        return {p.id: p for p in q.all()}

    def current_stock(self, product_id: str) -> int:
        stock = self._session.query(Product.stock).filter(Product.id == product_id).scalar()
        return int(stock or 0)
