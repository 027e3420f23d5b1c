import logging
from typing import List, Dict, Any, Optional

from spot_loadtest.auth import auth_headers
from spot_loadtest.config.config_loader import build_path
from spot_loadtest.telemetry.metrics import registry, STORE_LIST_DURATION, MENU_LIST_DURATION
from spot_loadtest.utils.response_parser import read_json, extract_items, unwrap_result, first_of
from spot_loadtest.utils.validators import response_time_ms

logger = logging.getLogger("store_browse")


def store_id_of(store: Dict[str, Any]) -> Any:
    return first_of(store, "id", "storeId")


def is_approved(store: Dict[str, Any], approved_status: str) -> bool:
    return first_of(store, "status", "storeStatus") == approved_status


def filter_approved(stores: List[Dict[str, Any]], approved_status: str) -> List[Dict[str, Any]]:
    return [store for store in stores if is_approved(store, approved_status)]


def fetch_stores(client, config, access_token, page=0, size=None, name="GET /stores") -> Optional[List[Dict[str, Any]]]:
    """Fetch one page of stores. Returns None when the call fails."""
    if size is None:
        size = config["orders"]["store_page_size"]

    with client.get(
        build_path(config, "stores"),
        params={"page": page, "size": size},
        headers=auth_headers(access_token),
        name=name,
        catch_response=True,
    ) as response:
        registry.trend(STORE_LIST_DURATION).add(response_time_ms(response))
        if response.status_code != 200:
            logger.warning(f"Store list fetch failed: {response.status_code}")
            response.failure(f"Store list fetch failed: {response.status_code}")
            return None
        return extract_items(read_json(response, logger), logger)


def fetch_menus(client, config, access_token, store_id) -> Optional[List[Dict[str, Any]]]:
    """Fetch the menus of a store. Returns None when the call fails."""
    with client.get(
        build_path(config, "menus", store_id=store_id),
        headers=auth_headers(access_token),
        name="GET /stores/{id}/menus",
        catch_response=True,
    ) as response:
        registry.trend(MENU_LIST_DURATION).add(response_time_ms(response))
        if response.status_code != 200:
            logger.warning(f"Menu list fetch failed for store {store_id}: {response.status_code}")
            response.failure(f"Menu list fetch failed: {response.status_code}")
            return None
        return extract_items(read_json(response, logger), logger)


def _get_one(client, path, access_token, name) -> Optional[Dict[str, Any]]:
    headers = auth_headers(access_token) if access_token else None
    with client.get(path, headers=headers, name=name, catch_response=True) as response:
        if response.status_code != 200:
            response.failure(f"{name} returned {response.status_code}")
            return None
        body = unwrap_result(read_json(response, logger))
        return body if isinstance(body, dict) else None


def get_store(client, config, access_token, store_id):
    return _get_one(client, build_path(config, "store", store_id=store_id), access_token, "GET /stores/{id}")


def get_menu(client, config, access_token, store_id, menu_id):
    return _get_one(
        client,
        build_path(config, "menu", store_id=store_id, menu_id=menu_id),
        access_token,
        "GET /stores/{id}/menus/{menuId}",
    )


def get_store_review_stats(client, config, store_id, access_token=None):
    return _get_one(client, build_path(config, "review_stats", store_id=store_id), access_token, "GET /stores/{id}/reviews/stats")


def get_store_reviews(client, config, store_id, access_token=None, page=0, size=5):
    headers = auth_headers(access_token) if access_token else None
    with client.get(
        build_path(config, "reviews", store_id=store_id),
        params={"page": page, "size": size},
        headers=headers,
        name="GET /stores/{id}/reviews",
        catch_response=True,
    ) as response:
        if response.status_code != 200:
            response.failure(f"Review list returned {response.status_code}")
            return []
        return extract_items(read_json(response, logger), logger)
