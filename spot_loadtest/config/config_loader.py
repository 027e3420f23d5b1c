import copy
import os
import logging
from typing import Dict, Any, Optional

import yaml

logger = logging.getLogger("config_loader")

DEFAULT_CONFIG = {
    "service": {
        "base_url": "http://localhost:8080",
        "api_prefix": "/api",
    },
    "test_type": "smoke",
    "credentials": {
        "customer": {"username": "customer", "password": "customer"},
        "owner": {"username": "owner", "password": "owner"},
    },
    "orders": {
        "approved_status": "APPROVED",
        "store_page_size": 50,
        "pickup_offset_minutes": 30,
        "max_quantity": 3,
        "need_disposables": False,
    },
    "test_data": {
        "store_id": None,
        "menu_id": None,
    },
    "endpoints": {
        "login": "/auth/login",
        "stores": "/stores",
        "store": "/stores/{store_id}",
        "menus": "/stores/{store_id}/menus",
        "menu": "/stores/{store_id}/menus/{menu_id}",
        "reviews": "/stores/{store_id}/reviews",
        "review_stats": "/stores/{store_id}/reviews/stats",
        "create_order": "/orders",
        "my_orders": "/orders/my",
        "my_active_orders": "/orders/my/active",
        "my_store_orders": "/orders/my-store",
        "my_store_active_orders": "/orders/my-store/active",
    },
    "user_type_weights": {
        "order_only_user": 1,
        "customer_browse_user": 3,
        "owner_manage_user": 2,
    },
    "think_time": {"min": 1, "max": 1},
    "profiles": {},
}

# Environment variable -> path inside the config dict
ENV_OVERRIDES = {
    "BASE_URL": ("service", "base_url"),
    "TEST_TYPE": ("test_type",),
    "CUSTOMER_USERNAME": ("credentials", "customer", "username"),
    "CUSTOMER_PASSWORD": ("credentials", "customer", "password"),
    "OWNER_USERNAME": ("credentials", "owner", "username"),
    "OWNER_PASSWORD": ("credentials", "owner", "password"),
    "STORE_ID": ("test_data", "store_id"),
    "MENU_ID": ("test_data", "menu_id"),
}


def load_config(config_path: Optional[str] = None, environ=None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file with environment variable overrides.

    Args:
        config_path: Path to the config YAML file. If None, will try default locations.
        environ: Mapping used for overrides, defaults to os.environ

    Returns:
        Dict containing configuration settings
    """
    if environ is None:
        environ = os.environ

    if config_path is None:
        possible_paths = [
            os.path.join(os.getcwd(), "config", "config.yaml"),
            os.path.join(os.getcwd(), "config.yaml"),
            os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "config", "config.yaml"),
        ]
        for path in possible_paths:
            if os.path.exists(path):
                config_path = path
                break

    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            file_config = yaml.safe_load(f)
        if file_config:
            deep_merge(config, file_config)
            logger.info(f"Loaded configuration from {config_path}")
    else:
        logger.warning("Config file not found, using defaults")

    for env_name, path in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            _set_path(config, path, value)
            if "PASSWORD" not in env_name:
                logger.info(f"Overriding {'.'.join(path)} from environment: {value}")

    return config


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """
    Recursively merge two dictionaries, modifying base in-place.

    Args:
        base: Base dictionary to merge into
        override: Dictionary with values to override in base
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def _set_path(config: Dict[str, Any], path, value) -> None:
    node = config
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = value


def build_path(config: Dict[str, Any], endpoint: str, **params) -> str:
    """Resolve a named endpoint to a request path, e.g. ``menus`` -> ``/api/stores/7/menus``."""
    template = config["endpoints"][endpoint]
    prefix = config["service"].get("api_prefix", "") or ""
    return f"{prefix.rstrip('/')}{template.format(**params)}"
