import logging

from locust import task, tag

from spot_loadtest.data.test_data import USER_PROFILES
from spot_loadtest.scenarios.order_queries import get_my_store_orders, get_my_store_active_orders
from spot_loadtest.users.base_user import BaseUser, config

weights = USER_PROFILES.get("owner", {})

logger = logging.getLogger("owner_user")


class OwnerManageUser(BaseUser):
    """Store owner watching incoming orders."""

    weight = config["user_type_weights"].get("owner_manage_user", 2)
    role = "owner"

    @task(weights.get("check_active_store_orders", 5))
    @tag("owner")
    def check_active_store_orders(self):
        orders = get_my_store_active_orders(self.client, config, self.access_token)
        if orders is not None:
            logger.debug(f"Owner has {len(orders)} active order(s)")

    @task(weights.get("check_store_orders", 3))
    @tag("owner")
    def check_store_orders(self):
        get_my_store_orders(self.client, config, self.access_token, {"page": 0, "size": 10})
