from types import SimpleNamespace

import pytest

from spot_loadtest.config.config_loader import build_path, deep_merge, load_config
from spot_loadtest.config.profiles import PROFILES, get_profile, profile_for_environment, total_duration
from spot_loadtest.exceptions import UnknownProfileError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "service:\n"
        "  base_url: http://staging:8080\n"
        "orders:\n"
        "  store_page_size: 20\n"
        "profiles:\n"
        "  load:\n"
        "    thresholds:\n"
        "      order_create_duration: {p95: 1200}\n"
    )
    return str(path)


def test_file_values_merge_over_defaults(config_file):
    config = load_config(config_file, environ={})

    assert config["service"]["base_url"] == "http://staging:8080"
    assert config["service"]["api_prefix"] == "/api"
    assert config["orders"]["store_page_size"] == 20
    assert config["orders"]["approved_status"] == "APPROVED"


def test_environment_overrides_file(config_file):
    config = load_config(config_file, environ={
        "BASE_URL": "http://prod:8080",
        "TEST_TYPE": "spike",
        "CUSTOMER_USERNAME": "alice",
        "CUSTOMER_PASSWORD": "secret",
        "STORE_ID": "s-42",
        "OWNER_PASSWORD": "",
    })

    assert config["service"]["base_url"] == "http://prod:8080"
    assert config["test_type"] == "spike"
    assert config["credentials"]["customer"] == {"username": "alice", "password": "secret"}
    assert config["credentials"]["owner"]["password"] == "owner"
    assert config["test_data"]["store_id"] == "s-42"


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"), environ={})
    assert config["test_type"] == "smoke"
    assert config["endpoints"]["create_order"] == "/orders"


def test_loading_does_not_mutate_defaults(config_file):
    load_config(config_file, environ={"BASE_URL": "http://elsewhere"})
    assert load_config("/nonexistent.yaml", environ={})["service"]["base_url"] == "http://localhost:8080"


def test_deep_merge_replaces_leaves_and_merges_dicts():
    base = {"a": {"b": 1, "c": 2}, "d": [1]}
    deep_merge(base, {"a": {"c": 3}, "d": [2], "e": 4})
    assert base == {"a": {"b": 1, "c": 3}, "d": [2], "e": 4}


def test_build_path_applies_prefix_and_parameters(config):
    assert build_path(config, "menus", store_id="s1") == "/api/stores/s1/menus"
    assert build_path(config, "menu", store_id="s1", menu_id="m2") == "/api/stores/s1/menus/m2"
    config["service"]["api_prefix"] = ""
    assert build_path(config, "create_order") == "/orders"


@pytest.mark.parametrize("name", ["smoke", "load", "stress", "spike"])
def test_every_profile_ends_at_zero_users_and_guards_order_errors(name):
    profile = get_profile(name)
    assert profile["name"] == name
    assert profile["stages"][-1]["target"] == 0
    assert "rate" in profile["thresholds"]["order_create_errors"]
    assert "p95" in profile["thresholds"]["order_create_duration"]


def test_profile_durations():
    assert total_duration(get_profile("smoke")) == 40
    assert total_duration(get_profile("load")) == 300
    assert total_duration(get_profile("stress")) == 480
    assert total_duration(get_profile("spike")) == 100


def test_profile_name_is_case_insensitive():
    assert get_profile(" LOAD ")["name"] == "load"


def test_unknown_profile_lists_valid_names():
    with pytest.raises(UnknownProfileError) as excinfo:
        get_profile("soak")
    assert isinstance(excinfo.value, ValueError)
    assert "smoke, load, stress, spike" in str(excinfo.value)


def test_profile_overrides_merge_without_touching_presets():
    profile = get_profile("load", {"load": {"thresholds": {"order_create_duration": {"p95": 1200}}}})

    assert profile["thresholds"]["order_create_duration"] == {"p95": 1200, "p99": 3000}
    assert PROFILES["load"]["thresholds"]["order_create_duration"]["p95"] == 1500


def test_profile_from_command_line_beats_config(config):
    environment = SimpleNamespace(parsed_options=SimpleNamespace(test_type="stress"))
    assert profile_for_environment(environment, config)["name"] == "stress"

    environment = SimpleNamespace(parsed_options=None)
    assert profile_for_environment(environment, config)["name"] == "smoke"
