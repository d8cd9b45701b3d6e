"""Pytest fixtures for ordering tests."""

from decimal import Decimal

import pytest

from ordering.config import AppConfig
from ordering.db.session import build_engine, build_session_factory, init_db
from ordering.models import Order, OrderItem, Payment, Product, ShippingInfo
from ordering.services.logging import configure_logging
from ordering.services.order_query_service import OrderQueryService
from ordering.services.order_service import OrderService
from ordering.services.status_service import StatusService
from ordering.utils.validators import CartLine, PlacementRequest, ShippingDetails


SHIPPING = {
    "full_name": "Asha Rao",
    "state": "Karnataka",
    "city": "Bengaluru",
    "country": "India",
    "address": "12 MG Road",
    "pincode": "560001",
    "phone": "9876543210",
}


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send(self, recipient, subject, html_body):
        self.sent.append((recipient, subject, html_body))


class FailingNotifier:
    def send(self, recipient, subject, html_body):
        raise RuntimeError("smtp down")


@pytest.fixture(autouse=True)
def reset_log_level():
    configure_logging("info")
    yield
    configure_logging("info")


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so several threads can share it."""
    eng = build_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def add_product(session_factory):
    counter = {"n": 0}

    def _add(price, stock, name=None, product_id=None):
        counter["n"] += 1
        pid = product_id or f"prod-{counter['n']:03d}"
        with session_factory() as session:
            session.add(
                Product(id=pid, name=name or f"Product {counter['n']}", price=Decimal(str(price)), stock=stock)
            )
        return pid

    return _add


@pytest.fixture
def stock_of(session_factory):
    def _stock(product_id):
        with session_factory() as session:
            return session.get(Product, product_id).stock

    return _stock


@pytest.fixture
def row_counts(session_factory):
    def _counts():
        with session_factory() as session:
            return {
                "orders": session.query(Order).count(),
                "order_items": session.query(OrderItem).count(),
                "shipping_info": session.query(ShippingInfo).count(),
                "payments": session.query(Payment).count(),
            }

    return _counts


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def order_service(session_factory, notifier):
    return OrderService(session_factory, notifier=notifier, retry_backoff=0)


@pytest.fixture
def query_service(session_factory):
    return OrderQueryService(session_factory)


@pytest.fixture
def status_service(session_factory):
    return StatusService(session_factory)


def make_request(*lines, shipping=None):
    """Build a PlacementRequest from (product_id, quantity) pairs."""
    return PlacementRequest(
        shipping=ShippingDetails(**(shipping or SHIPPING)),
        lines=[CartLine(product_id=pid, quantity=qty, image=f"https://img.example/{pid}.png") for pid, qty in lines],
    )


def make_config(**overrides):
    values = dict(
        database_url="sqlite:///:memory:",
        secret_key="test",
        log_level="INFO",
        tax_rate=Decimal("0.18"),
        free_shipping_threshold=Decimal("50"),
        flat_shipping_fee=Decimal("2"),
        store_retry_attempts=3,
        smtp_host="",
        smtp_port=587,
        smtp_user="",
        smtp_password="",
        mail_sender="",
    )
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture
def client(session_factory, notifier):
    from app import create_app

    app = create_app(make_config(), session_factory=session_factory, notifier=notifier)
    app.config["TESTING"] = True
    return app.test_client()
