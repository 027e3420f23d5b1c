import logging

from spot_loadtest.auth import login
from spot_loadtest.exceptions import SetupError
from spot_loadtest.scenarios.store_browse import fetch_stores, filter_approved

logger = logging.getLogger("run_setup")


def customer_setup(client, config):
    """Build the customer setup step: log in, then pre-load the approved stores once."""

    def _setup(state):
        token = login(client, config, "customer")
        state.set_token("customer", token)

        stores = fetch_stores(client, config, token, name="GET /stores (setup)")
        if stores is None:
            raise SetupError("Initial store fetch failed")

        approved_status = config["orders"]["approved_status"]
        approved = filter_approved(stores, approved_status)
        state.update_stores(approved)
        logger.info(f"Loaded {len(approved)} {approved_status} store(s) for test.")

    return _setup


def owner_setup(client, config):

    def _setup(state):
        state.set_token("owner", login(client, config, "owner"))

    return _setup
