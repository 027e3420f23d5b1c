"""
Normalization of the food-ordering API's response bodies.

The API wraps payloads in an ``ApiResponse`` envelope whose ``result`` is
either the payload itself or a Spring ``Page`` with its items under
``content``. The stub server (and some older endpoints) return bare arrays.
"""
import logging
from typing import List, Dict, Any, Optional

_MISSING = object()


def read_json(response, logger_instance: logging.Logger) -> Any:
    """Decode a response body, returning None when it is not JSON."""
    try:
        return response.json()
    except ValueError as e:
        logger_instance.warning(f"Response body is not JSON: {e} - {(response.text or '')[:300]}")
        return None


def unwrap_result(json_data: Any) -> Any:
    if isinstance(json_data, dict) and "result" in json_data and json_data["result"] is not None:
        return json_data["result"]
    return json_data


def extract_items(json_data: Any, logger_instance: logging.Logger) -> List[Dict[str, Any]]:
    """
    Parses a list of entities from any of the API's body shapes.
    """
    processed_data = unwrap_result(json_data)

    # Page object
    if isinstance(processed_data, dict) and "content" in processed_data:
        processed_data = processed_data["content"]

    if isinstance(processed_data, list):
        return [item for item in processed_data if isinstance(item, dict)]

    if processed_data is not None:
        logger_instance.warning(f"Unexpected list body structure: {type(processed_data).__name__}")
    return []


def first_of(item: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first truthy value among ``keys``, e.g. ``first_of(store, "id", "storeId")``."""
    for key in keys:
        value = item.get(key, _MISSING)
        if value is not _MISSING and value:
            return value
    return default


def order_identifier(order: Optional[Dict[str, Any]]) -> Any:
    body = unwrap_result(order) if order else None
    if not isinstance(body, dict):
        return None
    return first_of(body, "id", "orderId")
