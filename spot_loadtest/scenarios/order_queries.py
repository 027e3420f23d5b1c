import logging
from typing import Dict, Any, List, Optional

from spot_loadtest.auth import auth_headers
from spot_loadtest.config.config_loader import build_path
from spot_loadtest.telemetry.metrics import (
    registry,
    ORDER_LIST_DURATION,
    ORDER_LIST_ERRORS,
    ORDER_ACTIVE_DURATION,
    STORE_ORDER_LIST_DURATION,
)
from spot_loadtest.utils.response_parser import read_json, extract_items
from spot_loadtest.utils.validators import validate_response, check_status_code, check_response_time, response_time_ms

logger = logging.getLogger("order_queries")

ORDER_LIST_DEFAULTS = {
    "page": 0,
    "size": 10,
    "sortBy": "createdAt",
    "direction": "DESC",
}

# Order history must answer within this budget to count as a success
ORDER_LIST_MAX_MS = 500


def build_order_query(params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge paging defaults with the given filters, dropping unset (None) values."""
    query = dict(ORDER_LIST_DEFAULTS)
    query.update(params or {})
    return {key: value for key, value in query.items() if value is not None}


def get_my_orders(client, config, access_token, params=None) -> Optional[List[Dict[str, Any]]]:
    with client.get(
        build_path(config, "my_orders"),
        params=build_order_query(params),
        headers=auth_headers(access_token),
        name="GET /orders/my",
        catch_response=True,
    ) as response:
        success = validate_response(response, [check_status_code(200), check_response_time(ORDER_LIST_MAX_MS)])
        registry.trend(ORDER_LIST_DURATION).add(response_time_ms(response))
        registry.rate(ORDER_LIST_ERRORS).add(not success)
        if not success:
            return None
        return extract_items(read_json(response, logger), logger)


def _get_order_list(client, path, access_token, name, metric_name, params=None) -> Optional[List[Dict[str, Any]]]:
    with client.get(path, params=params, headers=auth_headers(access_token), name=name, catch_response=True) as response:
        registry.trend(metric_name).add(response_time_ms(response))
        if not validate_response(response, [check_status_code(200)]):
            logger.warning(f"{name} failed: {response.status_code}")
            return None
        return extract_items(read_json(response, logger), logger)


def get_my_active_orders(client, config, access_token):
    return _get_order_list(
        client, build_path(config, "my_active_orders"), access_token, "GET /orders/my/active", ORDER_ACTIVE_DURATION
    )


def get_my_store_orders(client, config, access_token, params=None):
    return _get_order_list(
        client,
        build_path(config, "my_store_orders"),
        access_token,
        "GET /orders/my-store",
        STORE_ORDER_LIST_DURATION,
        params=build_order_query(params),
    )


def get_my_store_active_orders(client, config, access_token):
    return _get_order_list(
        client,
        build_path(config, "my_store_active_orders"),
        access_token,
        "GET /orders/my-store/active",
        STORE_ORDER_LIST_DURATION,
    )
