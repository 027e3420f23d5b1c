"""
Traffic profiles for the order load tests.

Each profile is a list of ramping stages and the thresholds the run must
satisfy. A stage ramps linearly from the previous stage's target to its own
``target`` over ``duration`` seconds. Thresholds are upper bounds keyed by
metric name and statistic (``rate``, ``avg``, ``max``, ``p95``, ``p99``...).
"""
import copy
import logging
from typing import Dict, Any, Optional

from spot_loadtest.config.config_loader import deep_merge
from spot_loadtest.exceptions import UnknownProfileError

logger = logging.getLogger("profiles")

PROFILES = {
    # Minimal users, checks that the script and the order endpoint work at all
    "smoke": {
        "stages": [
            {"duration": 10, "target": 1},
            {"duration": 20, "target": 1},
            {"duration": 10, "target": 0},
        ],
        "thresholds": {
            "order_create_errors": {"rate": 0.01},
            "order_create_duration": {"p95": 2000},
        },
    },
    # Expected everyday traffic
    "load": {
        "stages": [
            {"duration": 60, "target": 10},
            {"duration": 180, "target": 10},
            {"duration": 60, "target": 0},
        ],
        "thresholds": {
            "order_create_errors": {"rate": 0.05},
            "order_create_duration": {"p95": 1500, "p99": 3000},
        },
    },
    # Step up until the error rate climbs, then hold and recover
    "stress": {
        "stages": [
            {"duration": 60, "target": 20},
            {"duration": 60, "target": 40},
            {"duration": 60, "target": 60},
            {"duration": 60, "target": 80},
            {"duration": 60, "target": 100},
            {"duration": 120, "target": 100},
            {"duration": 60, "target": 0},
        ],
        "thresholds": {
            "order_create_errors": {"rate": 0.1},
            "order_create_duration": {"p95": 5000},
        },
    },
    # Lunch-rush burst
    "spike": {
        "stages": [
            {"duration": 10, "target": 5},
            {"duration": 10, "target": 100},
            {"duration": 30, "target": 100},
            {"duration": 10, "target": 5},
            {"duration": 30, "target": 5},
            {"duration": 10, "target": 0},
        ],
        "thresholds": {
            "order_create_errors": {"rate": 0.15},
            "order_create_duration": {"p95": 10000},
        },
    },
}


def get_profile(name: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Return a copy of the named profile, merged with any overrides from config.

    Args:
        name: Profile name (smoke, load, stress, spike or one defined in config)
        overrides: The ``profiles`` section of the loaded config

    Raises:
        UnknownProfileError: if no profile with that name exists
    """
    profiles = copy.deepcopy(PROFILES)
    if overrides:
        deep_merge(profiles, copy.deepcopy(overrides))

    key = (name or "").strip().lower()
    if key not in profiles:
        raise UnknownProfileError(name, profiles.keys())

    profile = profiles[key]
    profile["name"] = key
    return profile


def profile_for_environment(environment, config: Dict[str, Any]) -> Dict[str, Any]:
    """Resolve the profile chosen with --test-type, falling back to config's test_type."""
    parsed_options = getattr(environment, "parsed_options", None)
    name = getattr(parsed_options, "test_type", None) or config.get("test_type", "smoke")
    return get_profile(name, config.get("profiles"))


def total_duration(profile: Dict[str, Any]) -> int:
    return sum(stage["duration"] for stage in profile["stages"])
