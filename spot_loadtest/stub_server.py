#!/usr/bin/env python3
"""
Stub of the food-ordering API for trying the load tests locally.

    python -m spot_loadtest.stub_server --port 8080
    locust -f locustfile.py --host http://localhost:8080
"""
import argparse
import logging
import random
import threading
import time
import uuid
from datetime import datetime

from flask import Flask, request, jsonify, abort

from spot_loadtest.data.test_data import SEED_STORES, SEED_MENUS, SEED_USERS

logger = logging.getLogger("stub-server")

ACTIVE_STATUSES = ("PENDING", "ACCEPTED", "COOKING", "READY")


def _page(items, page, size):
    start = page * size
    return {
        "content": items[start:start + size],
        "page": page,
        "size": size,
        "totalElements": len(items),
    }


def create_app(latency=(0.02, 0.1), price_skew=0):
    """
    Build the stub app.

    Args:
        latency: (min, max) seconds of simulated processing time, or None
        price_skew: added to every order total to provoke price mismatches
    """
    app = Flask(__name__)
    lock = threading.Lock()
    tokens = {}
    orders = []
    stores = {store["id"]: store for store in SEED_STORES}
    menus = {menu["id"]: dict(menu, storeId=store_id) for store_id, items in SEED_MENUS.items() for menu in items}

    def simulate_work():
        if latency:
            time.sleep(random.uniform(*latency))

    def current_user():
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return tokens.get(header[len("Bearer "):])

    def paging():
        try:
            page, size = int(request.args.get("page", 0)), int(request.args.get("size", 10))
        except ValueError:
            abort(400, description="page and size must be integers")
        if page < 0 or size < 1:
            abort(400, description="page must be >= 0 and size >= 1")
        return page, size

    def unauthorized():
        return jsonify({"error": "Unauthorized"}), 401

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({"error": error.description}), 400

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True) or {}
        user = SEED_USERS.get(data.get("username"))
        if not user or user["password"] != data.get("password"):
            return jsonify({"error": "Invalid credentials"}), 401
        token = uuid.uuid4().hex
        with lock:
            tokens[token] = data["username"]
        return jsonify({"result": {"accessToken": token, "role": user["role"]}})

    @app.route("/api/stores", methods=["GET"])
    def list_stores():
        if not current_user():
            return unauthorized()
        simulate_work()
        page, size = paging()
        return jsonify({"result": _page(list(stores.values()), page, size)})

    @app.route("/api/stores/<store_id>", methods=["GET"])
    def get_store(store_id):
        if not current_user():
            return unauthorized()
        store = stores.get(store_id)
        if not store:
            return jsonify({"error": "Store not found"}), 404
        return jsonify({"result": store})

    @app.route("/api/stores/<store_id>/menus", methods=["GET"])
    def list_menus(store_id):
        if not current_user():
            return unauthorized()
        if store_id not in stores:
            return jsonify({"error": "Store not found"}), 404
        simulate_work()
        return jsonify({"result": [menu for menu in menus.values() if menu["storeId"] == store_id]})

    @app.route("/api/stores/<store_id>/menus/<menu_id>", methods=["GET"])
    def get_menu(store_id, menu_id):
        if not current_user():
            return unauthorized()
        menu = menus.get(menu_id)
        if not menu or menu["storeId"] != store_id:
            return jsonify({"error": "Menu not found"}), 404
        return jsonify({"result": menu})

    @app.route("/api/stores/<store_id>/reviews", methods=["GET"])
    def list_reviews(store_id):
        if store_id not in stores:
            return jsonify({"error": "Store not found"}), 404
        page, size = paging()
        reviews = [{"id": f"{store_id}-r{i}", "rating": 4 + i % 2, "content": "Tasty"} for i in range(12)]
        return jsonify({"result": _page(reviews, page, size)})

    @app.route("/api/stores/<store_id>/reviews/stats", methods=["GET"])
    def review_stats(store_id):
        if store_id not in stores:
            return jsonify({"error": "Store not found"}), 404
        return jsonify({"result": {"storeId": store_id, "averageRating": 4.5, "totalReviews": 12}})

    @app.route("/api/orders", methods=["POST"])
    def create_order():
        username = current_user()
        if not username:
            return unauthorized()
        simulate_work()
        data = request.get_json(silent=True) or {}

        store = stores.get(data.get("storeId"))
        if not store:
            return jsonify({"error": "Store not found"}), 404
        if store["status"] != "APPROVED":
            return jsonify({"error": "Store is not open for orders"}), 400
        try:
            datetime.strptime(data.get("pickupTime", ""), "%Y-%m-%dT%H:%M:%S")
        except ValueError:
            return jsonify({"error": "pickupTime must be yyyy-MM-ddTHH:mm:ss"}), 400

        items = data.get("orderItems") or []
        if not items:
            return jsonify({"error": "orderItems must not be empty"}), 400
        total = 0
        for item in items:
            menu = menus.get(item.get("menuId"))
            quantity = item.get("quantity", 0)
            if not menu or menu["storeId"] != store["id"]:
                return jsonify({"error": "Menu not found"}), 404
            if not isinstance(quantity, int) or quantity < 1:
                return jsonify({"error": "quantity must be at least 1"}), 400
            total += menu["price"] * quantity

        order = {
            "id": str(uuid.uuid4()),
            "storeId": store["id"],
            "customer": username,
            "orderItems": items,
            "pickupTime": data["pickupTime"],
            "needDisposables": bool(data.get("needDisposables")),
            "request": data.get("request", ""),
            "totalPrice": total + price_skew,
            "status": "PENDING",
            "createdAt": datetime.now().isoformat(timespec="seconds"),
        }
        with lock:
            orders.append(order)
        logger.info(f"Order {order['id']} for store {store['name']}: {order['totalPrice']}")
        return jsonify({"result": order}), 201

    def list_orders(predicate):
        page, size = paging()
        with lock:
            matching = [order for order in orders if predicate(order)]
        matching.sort(key=lambda order: order["createdAt"], reverse=request.args.get("direction", "DESC") == "DESC")
        return jsonify({"result": _page(matching, page, size)})

    @app.route("/api/orders/my", methods=["GET"])
    def my_orders():
        username = current_user()
        if not username:
            return unauthorized()
        return list_orders(lambda order: order["customer"] == username)

    @app.route("/api/orders/my/active", methods=["GET"])
    def my_active_orders():
        username = current_user()
        if not username:
            return unauthorized()
        with lock:
            active = [o for o in orders if o["customer"] == username and o["status"] in ACTIVE_STATUSES]
        return jsonify({"result": active})

    @app.route("/api/orders/my-store", methods=["GET"])
    def my_store_orders():
        if current_user() != "owner":
            return unauthorized()
        return list_orders(lambda order: True)

    @app.route("/api/orders/my-store/active", methods=["GET"])
    def my_store_active_orders():
        if current_user() != "owner":
            return unauthorized()
        with lock:
            active = [order for order in orders if order["status"] in ACTIVE_STATUSES]
        return jsonify({"result": active})

    return app


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Stub food-ordering API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--price-skew", type=int, default=0, help="Added to order totals to provoke price mismatches")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logger.info(f"Starting stub API on {args.host}:{args.port}")
    create_app(price_skew=args.price_skew).run(host=args.host, port=args.port, threaded=True)
