"""Order placement and administration API routes."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from ordering.errors import ValidationError
from ordering.utils.validators import PlacementRequest


orders_bp = Blueprint("orders", __name__, url_prefix="/api/v1/order")

ADMIN_ROLE = "Admin"


def _components() -> Dict[str, Any]:
    return current_app.extensions["ordering_components"]


def _buyer_id() -> Optional[str]:
    # identity is resolved upstream; this service only trusts the forwarded headers
    value = request.headers.get("X-Buyer-Id", "").strip()
    return value or None


def _require_buyer():
    if _buyer_id() is None:
        return jsonify({"success": False, "message": "Please login to access this resource."}), 401
    return None


def _require_admin():
    denied = _require_buyer()
    if denied is not None:
        return denied
    if request.headers.get("X-Buyer-Role", "").strip() != ADMIN_ROLE:
        return jsonify({"success": False, "message": "You are not allowed to access this resource."}), 403
    return None


def _request_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        payload = request.form.to_dict()
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object.")
    return payload


@orders_bp.post("/new")
def place_new_order():
    denied = _require_buyer()
    if denied is not None:
        return denied
    placement = PlacementRequest.from_payload(_request_payload())
    result = _components()["order_service"].place_order(
        buyer_id=_buyer_id(),
        request=placement,
        buyer_email=request.headers.get("X-Buyer-Email") or None,
    )
    return jsonify(
        {
            "success": True,
            "message": "Order placed successfully.",
            "order": result["order"],
            "total_price": result["total_price"],
        }
    )


@orders_bp.get("/orders/me")
def fetch_my_orders():
    denied = _require_buyer()
    if denied is not None:
        return denied
    orders = _components()["query_service"].fetch_orders_for_buyer(_buyer_id())
    return jsonify({"success": True, "message": "All your orders are fetched.", "myOrders": orders})


@orders_bp.get("/admin/getall")
def fetch_all_orders():
    denied = _require_admin()
    if denied is not None:
        return denied
    orders = _components()["query_service"].fetch_all_orders()
    return jsonify({"success": True, "message": "All orders fetched.", "orders": orders})


@orders_bp.get("/<order_id>")
def fetch_single_order(order_id: str):
    denied = _require_buyer()
    if denied is not None:
        return denied
    order = _components()["query_service"].fetch_order(order_id)
    return jsonify({"success": True, "message": "Order fetched.", "orders": order})


@orders_bp.put("/admin/update/<order_id>")
def update_order_status(order_id: str):
    denied = _require_admin()
    if denied is not None:
        return denied
    payload = _request_payload()
    updated = _components()["status_service"].update_status(order_id, payload.get("status"))
    return jsonify({"success": True, "message": "Order status updated.", "updatedOrder": updated})


@orders_bp.delete("/admin/delete/<order_id>")
def delete_order(order_id: str):
    denied = _require_admin()
    if denied is not None:
        return denied
    deleted = _components()["status_service"].delete_order(order_id)
    return jsonify({"success": True, "message": "Order deleted.", "order": deleted})
