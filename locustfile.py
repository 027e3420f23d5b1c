"""
Load tests for the Spot food-ordering API.

    locust -f locustfile.py --host http://localhost:8080                  # all user types
    TEST_TYPE=load locust -f locustfile.py --headless                     # load profile
    locust -f locustfile.py --headless --test-type stress --tags order    # order-only stress test

The traffic shape follows the selected profile (smoke, load, stress, spike);
the run exits with code 1 when the profile's thresholds are not met.
"""
import logging

from locust import events

from spot_loadtest.config.config_loader import load_config
from spot_loadtest.config.profiles import PROFILES, profile_for_environment
from spot_loadtest.exceptions import UnknownProfileError
from spot_loadtest.load_shapes.profile_shape import ProfileLoadShape
from spot_loadtest.users.order_user import OrderOnlyUser
from spot_loadtest.users.customer_user import CustomerBrowseUser
from spot_loadtest.users.owner_user import OwnerManageUser
from spot_loadtest.telemetry.event_hooks import register_stats_event_handlers
from spot_loadtest.telemetry.monitoring import setup_opentelemetry
from spot_loadtest.web_extension import init_web_ui_extension

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.FileHandler("locust.log"), logging.StreamHandler()]
)
logger = logging.getLogger("locustfile")

config = load_config()

__all__ = ["OrderOnlyUser", "CustomerBrowseUser", "OwnerManageUser", "ProfileLoadShape"]

# --tags value -> user class to spawn
TAG_TO_USER_CLASS = {
    "order": OrderOnlyUser,
    "customer": CustomerBrowseUser,
    "owner": OwnerManageUser,
}


@events.init_command_line_parser.add_listener
def _(parser):
    parser.add_argument(
        "--test-type",
        type=str,
        env_var="TEST_TYPE",
        default=config["test_type"],
        help=f"Traffic profile: {', '.join(PROFILES)} (default: {config['test_type']})"
    )


@events.init.add_listener
def on_locust_init(environment, **kwargs):
    try:
        profile = profile_for_environment(environment, config)
    except UnknownProfileError as e:
        logger.error(str(e))
        environment.process_exit_code = 1
        raise
    logger.info(f"Selected profile '{profile['name']}'")

    selected_tags = set(getattr(environment.parsed_options, "tags", None) or [])
    selected_classes = [user_class for tag, user_class in TAG_TO_USER_CLASS.items() if tag in selected_tags]
    if selected_classes:
        environment.user_classes = selected_classes

    init_web_ui_extension(environment, config)


setup_opentelemetry(config)
register_stats_event_handlers(config)
