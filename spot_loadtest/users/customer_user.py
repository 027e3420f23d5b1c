import logging
import random

from locust import task, tag

from spot_loadtest.data.test_data import USER_PROFILES
from spot_loadtest.scenarios.order_flow import create_order_dynamic
from spot_loadtest.scenarios.order_queries import get_my_orders, get_my_active_orders
from spot_loadtest.scenarios.store_browse import (
    fetch_stores,
    fetch_menus,
    get_store,
    get_menu,
    get_store_review_stats,
    get_store_reviews,
    store_id_of,
)
from spot_loadtest.users.base_user import BaseUser, config
from spot_loadtest.utils.response_parser import first_of

weights = USER_PROFILES.get("customer", {})

logger = logging.getLogger("customer_user")


class CustomerBrowseUser(BaseUser):
    """
    Customer that browses stores and menus, orders now and then and checks
    its order history.
    """

    weight = config["user_type_weights"].get("customer_browse_user", 3)
    role = "customer"

    @task(weights.get("browse_and_order", 10))
    @tag("customer", "order")
    def browse_and_order(self):
        """Look at the store list, then place an order with price verification."""
        fetch_stores(self.client, config, self.access_token, page=0, size=10)

        outcome = create_order_dynamic(self.client, config, self.access_token, validate_integrity=True)
        if outcome:
            logger.debug(f"[Order Success] ID: {outcome['order_id']}")

    @task(weights.get("view_store_details", 5))
    @tag("customer", "browse")
    def view_store_details(self):
        store = self.run_state.get_random_store()
        if not store:
            logger.debug("No stores available for details lookup")
            return

        store_id = store_id_of(store)
        get_store(self.client, config, self.access_token, store_id)

        menus = fetch_menus(self.client, config, self.access_token, store_id)
        if menus:
            menu = random.choice(menus)
            get_menu(self.client, config, self.access_token, store_id, first_of(menu, "id", "menuId"))

        get_store_review_stats(self.client, config, store_id)
        get_store_reviews(self.client, config, store_id, page=0, size=5)

    @task(weights.get("check_my_orders", 3))
    @tag("customer", "history")
    def check_my_orders(self):
        get_my_orders(self.client, config, self.access_token, {"page": 0, "size": 5})
        get_my_active_orders(self.client, config, self.access_token)
