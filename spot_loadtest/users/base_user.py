import logging

from locust import HttpUser, between
from locust.exception import StopUser

from spot_loadtest.config.config_loader import load_config
from spot_loadtest.exceptions import SetupError
from spot_loadtest.scenarios.run_setup import customer_setup, owner_setup
from spot_loadtest.utils.run_state import RunState

config = load_config()

logger = logging.getLogger("base_user")

# Global run state shared by all users
run_state = RunState()

SETUP_STEPS = {
    "customer": customer_setup,
    "owner": owner_setup,
}


class BaseUser(HttpUser):
    """Base user: logs in (once per role for the whole run) and carries the role's token."""

    abstract = True

    host = config["service"]["base_url"]
    wait_time = between(config["think_time"]["min"], config["think_time"]["max"])

    role = "customer"

    def on_start(self):
        self.run_state = run_state
        try:
            self.run_state.ensure_setup(self.role, SETUP_STEPS[self.role](self.client, config))
        except SetupError as e:
            logger.error(f"Setup failed, stopping the test: {e}")
            self.environment.process_exit_code = 1
            if self.environment.runner is not None:
                self.environment.runner.quit()
            raise StopUser()

        self.access_token = self.run_state.get_token(self.role)

    @property
    def test_type(self):
        parsed_options = getattr(self.environment, "parsed_options", None)
        return getattr(parsed_options, "test_type", None) or config["test_type"]
