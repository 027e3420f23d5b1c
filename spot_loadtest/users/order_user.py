import logging

from locust import task, tag

from spot_loadtest.scenarios.order_flow import verify_order
from spot_loadtest.users.base_user import BaseUser, config

logger = logging.getLogger("order_user")


class OrderOnlyUser(BaseUser):
    """
    Customer that does nothing but place orders: pick a store and menu,
    order, and verify the server's total price.
    """

    weight = config["user_type_weights"].get("order_only_user", 1)
    role = "customer"

    @task
    @tag("order")
    def order_scenario(self):
        verify_order(self.client, config, self.access_token, self.run_state.get_stores(), test_type=self.test_type)
