from locust import LoadTestShape
import logging
from typing import Dict, List, Tuple, Optional, Any

from spot_loadtest.config.config_loader import load_config
from spot_loadtest.config.profiles import profile_for_environment

logger = logging.getLogger("profile_shape")

config = load_config()


def users_at(stages: List[Dict[str, int]], run_time: float, start_users: int = 0) -> Optional[Tuple[int, float]]:
    """
    User count and spawn rate at ``run_time`` for ramping stages.

    Within a stage the count moves linearly from the previous stage's target
    to this stage's target. Returns None once every stage has elapsed.
    """
    elapsed = 0
    previous_target = start_users
    for stage in stages:
        duration = stage["duration"]
        target = stage["target"]
        if elapsed <= run_time < elapsed + duration:
            fraction = (run_time - elapsed) / duration
            users = int(previous_target + (target - previous_target) * fraction + 0.5)
            spawn_rate = max(1.0, abs(target - previous_target) / duration)
            return users, spawn_rate
        elapsed += duration
        previous_target = target

    return None


class ProfileLoadShape(LoadTestShape):
    """
    Follows the stages of the selected traffic profile (smoke, load, stress
    or spike), ramping users between stage targets.
    """

    def __init__(self):
        super().__init__()
        self.profile = None

    def set_profile(self, profile: Dict[str, Any]) -> None:
        self.profile = profile
        logger.info(f"Using '{profile.get('name', 'custom')}' profile: {len(profile['stages'])} stages")

    def _resolve_profile(self) -> Dict[str, Any]:
        if self.profile is None:
            environment = getattr(self.runner, "environment", None)
            self.set_profile(profile_for_environment(environment, config))
        return self.profile

    def tick(self) -> Optional[Tuple[int, float]]:
        """
        Return the number of users and spawn rate for the current time.

        Returns:
            Tuple of (user_count, spawn_rate) or None if the test is finished
        """
        return users_at(self._resolve_profile()["stages"], self.get_run_time())
