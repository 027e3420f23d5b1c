"""
Order creation with price verification.

One iteration picks an approved store (from the run's pre-fetched list, or
live when that list is empty), picks one of its menus, orders 1-3 of it for
pickup in 30 minutes and checks that the server's total equals unit price x
quantity. Any failed step ends the iteration; nothing is retried.
"""
import logging
import random
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import List, Dict, Any, Optional

from spot_loadtest.auth import auth_headers
from spot_loadtest.config.config_loader import build_path
from spot_loadtest.scenarios.store_browse import fetch_stores, fetch_menus, filter_approved, store_id_of
from spot_loadtest.telemetry.metrics import (
    registry,
    ORDER_CREATE_DURATION,
    ORDER_CREATE_ERRORS,
    PRICE_INTEGRITY_ERRORS,
    STORE_STATUS_ERRORS,
)
from spot_loadtest.utils.response_parser import read_json, unwrap_result, first_of, order_identifier
from spot_loadtest.utils.validators import response_time_ms

logger = logging.getLogger("order_flow")

PICKUP_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def build_pickup_time(now: Optional[datetime] = None, offset_minutes: int = 30) -> str:
    """Local pickup time ``offset_minutes`` from now, without a UTC offset (a Java LocalDateTime)."""
    if now is None:
        now = datetime.now()
    return (now + timedelta(minutes=offset_minutes)).strftime(PICKUP_TIME_FORMAT)


def to_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return Decimal(0)
    return result if result.is_finite() else Decimal(0)


def expected_total(unit_price: Any, quantity: int) -> Decimal:
    return to_decimal(unit_price) * quantity


def server_total(order_result: Optional[Dict[str, Any]]) -> Decimal:
    body = unwrap_result(order_result)
    if not isinstance(body, dict):
        return Decimal(0)
    return to_decimal(first_of(body, "totalPrice", "totalAmount", default=0))


def check_price_integrity(expected: Any, actual: Any) -> bool:
    """
    True when the totals agree, or when either side is not positive
    (a free menu or a response without a total cannot be compared).
    """
    expected, actual = to_decimal(expected), to_decimal(actual)
    if expected <= 0 or actual <= 0:
        return True
    return expected == actual


def record_price_integrity(expected: Any, actual: Any) -> bool:
    passed = check_price_integrity(expected, actual)
    if not passed:
        logger.error(f"[PRICE MISMATCH] expected={expected}, actual={actual}")
    registry.rate(PRICE_INTEGRITY_ERRORS).add(not passed)
    return passed


def build_order_payload(store_id, order_items, pickup_time, need_disposables=False, note="locust load test order"):
    return {
        "storeId": store_id,
        "orderItems": order_items,
        "pickupTime": pickup_time,
        "needDisposables": need_disposables,
        "request": note,
    }


def _pinned(items, pinned_id, *id_keys):
    if not pinned_id:
        return items
    return [item for item in items if str(first_of(item, *id_keys)) == str(pinned_id)]


def pick_store(client, config, access_token, cached_stores: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """
    Use the pre-fetched approved stores when there are any, otherwise query
    the store list and choose among its approved stores. A configured
    STORE_ID narrows the choice to that store.
    """
    approved_status = config["orders"]["approved_status"]
    pinned_id = config["test_data"].get("store_id")
    candidates = _pinned(filter_approved(cached_stores or [], approved_status), pinned_id, "id", "storeId")
    if candidates:
        return random.choice(candidates)

    stores = fetch_stores(client, config, access_token, name="GET /stores (fallback)")
    if stores is None:
        return None

    candidates = _pinned(filter_approved(stores, approved_status), pinned_id, "id", "storeId")
    if not candidates:
        logger.warning(f"No {approved_status} stores found.")
        return None
    return random.choice(candidates)


def pick_menu(client, config, access_token, store_id) -> Optional[Dict[str, Any]]:
    menus = fetch_menus(client, config, access_token, store_id)
    if menus is None:
        return None
    menus = _pinned(menus, config["test_data"].get("menu_id"), "id", "menuId")
    if not menus:
        logger.warning(f"No menus for store {store_id}")
        return None
    return random.choice(menus)


def create_order(client, config, access_token, payload) -> Optional[Dict[str, Any]]:
    """POST the order. Returns the decoded body on 200/201, None otherwise."""
    with client.post(
        build_path(config, "create_order"),
        json=payload,
        headers=auth_headers(access_token),
        name="POST /orders",
        catch_response=True,
    ) as response:
        success = response.status_code in (200, 201)
        registry.trend(ORDER_CREATE_DURATION).add(response_time_ms(response))
        registry.rate(ORDER_CREATE_ERRORS).add(not success)

        if not success:
            logger.error(f"[Order FAIL] {response.status_code} - {(response.text or '')[:300]}")
            response.failure(f"createOrder: status {response.status_code}, expected 200 or 201")
            return None

        body = read_json(response, logger)
        return body if body is not None else {}


def _order_and_verify(client, config, access_token, store, menu, note, validate_integrity=True):
    orders = config["orders"]
    store_id = store_id_of(store)
    menu_id = first_of(menu, "id", "menuId")
    quantity = random.randint(1, orders["max_quantity"])
    expected = expected_total(menu.get("price"), quantity)

    payload = build_order_payload(
        store_id,
        [{"menuId": menu_id, "quantity": quantity, "options": []}],
        build_pickup_time(offset_minutes=orders["pickup_offset_minutes"]),
        need_disposables=orders["need_disposables"],
        note=note,
    )
    order = create_order(client, config, access_token, payload)
    if order is None:
        return None

    actual = server_total(order)
    price_ok = record_price_integrity(expected, actual) if validate_integrity else None
    order_id = order_identifier(order)
    logger.info(f"[Order OK] id={order_id}, store={store_id}, menu={menu_id}, qty={quantity}")

    return {
        "order": order,
        "order_id": order_id,
        "store_id": store_id,
        "menu_id": menu_id,
        "quantity": quantity,
        "expected_total": expected,
        "actual_total": actual,
        "price_ok": price_ok,
    }


def verify_order(client, config, access_token, candidate_stores, test_type="smoke") -> Optional[Dict[str, Any]]:
    """
    Run one order-and-verify iteration.

    Args:
        client: Locust HTTP session
        config: Loaded configuration
        access_token: Customer bearer token
        candidate_stores: Approved stores fetched at setup (may be empty)
        test_type: Profile name, used in the order note

    Returns:
        Outcome dict (order body, ids, quantity, expected/actual totals,
        price_ok) or None when the iteration was aborted
    """
    store = pick_store(client, config, access_token, candidate_stores)
    if not store:
        return None

    menu = pick_menu(client, config, access_token, store_id_of(store))
    if not menu:
        return None

    return _order_and_verify(client, config, access_token, store, menu, f"locust {test_type} test order")


def create_order_dynamic(client, config, access_token, validate_integrity=True) -> Optional[Dict[str, Any]]:
    """Order variant used by browsing customers: always looks the store list up live."""
    stores = fetch_stores(client, config, access_token)
    if not stores:
        logger.warning("No stores available")
        return None

    open_stores = _pinned(
        filter_approved(stores, config["orders"]["approved_status"]),
        config["test_data"].get("store_id"),
        "id", "storeId",
    )
    registry.rate(STORE_STATUS_ERRORS).add(not open_stores)
    if not open_stores:
        return None

    store = random.choice(open_stores)
    menu = pick_menu(client, config, access_token, store_id_of(store))
    if not menu:
        return None

    note = f"Dynamic order from locust - Store: {store.get('name') or store_id_of(store)}"
    return _order_and_verify(client, config, access_token, store, menu, note, validate_integrity)
