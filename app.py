"""Order placement service Flask application."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify

from ordering.config import AppConfig, load_env
from ordering.db.session import build_engine, build_session_factory, init_db
from ordering.errors import OrderingError, PersistenceInvariantError
from ordering.services.logging import configure_logging, log_event
from ordering.services.notification_service import build_notifier
from ordering.services.order_query_service import OrderQueryService
from ordering.services.order_service import OrderService
from ordering.services.pricing import PricingPolicy
from ordering.services.status_service import StatusService
from routes import orders


def _handle_ordering_error(exc: OrderingError):
    if not isinstance(exc, PersistenceInvariantError) and exc.status_code >= 500:
        log_event("error", "request.failed", error=type(exc).__name__, message=str(exc))
    return jsonify({"success": False, "message": str(exc)}), exc.status_code


def create_app(config: Optional[AppConfig] = None, session_factory=None, notifier=None) -> Flask:
    config = config or load_env()
    configure_logging(config.log_level)

    if session_factory is None:
        engine = build_engine(config.database_url)
        init_db(engine)
        session_factory = build_session_factory(engine)
    if notifier is None:
        notifier = build_notifier(config)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["ORDERING_CONFIG"] = config

    policy = PricingPolicy(
        tax_rate=config.tax_rate,
        free_shipping_threshold=config.free_shipping_threshold,
        flat_shipping_fee=config.flat_shipping_fee,
    )
    components = {
        "order_service": OrderService(
            session_factory,
            notifier=notifier,
            policy=policy,
            retry_attempts=config.store_retry_attempts,
        ),
        "query_service": OrderQueryService(session_factory),
        "status_service": StatusService(session_factory),
    }
    app.extensions["ordering_components"] = components

    app.register_blueprint(orders.orders_bp)
    app.register_error_handler(OrderingError, _handle_ordering_error)

    @app.get("/api/v1/health")
    def health():
        return jsonify({"status": "ok"})

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=4000, debug=False)


if __name__ == "__main__":
    main()
