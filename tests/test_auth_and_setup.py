import threading

import pytest

from spot_loadtest.auth import auth_headers, login
from spot_loadtest.exceptions import SetupError
from spot_loadtest.scenarios.run_setup import customer_setup, owner_setup
from spot_loadtest.utils.run_state import RunState

LOGIN_PATH = "/api/auth/login"
STORES_PATH = "/api/stores"


def test_auth_headers_carry_bearer_token():
    assert auth_headers("abc")["Authorization"] == "Bearer abc"


def test_login_reads_token_from_result_envelope(session, config):
    session.add("POST", LOGIN_PATH, body={"result": {"accessToken": "tok-1"}})

    assert login(session, config, "customer") == "tok-1"
    assert session.calls[0]["json"] == {"username": "customer", "password": "customer"}


def test_login_falls_back_to_authorization_header(session, config):
    session.add("POST", LOGIN_PATH, body={"result": "ok"}, headers={"Authorization": "Bearer tok-2"})
    assert login(session, config, "owner") == "tok-2"


def test_login_failure_is_a_setup_error(session, config):
    session.add("POST", LOGIN_PATH, status_code=401, body={"error": "bad credentials"})

    with pytest.raises(SetupError, match="Customer login failed"):
        login(session, config, "customer")
    assert session.last_response.succeeded is False


def test_login_without_token_is_a_setup_error(session, config):
    session.add("POST", LOGIN_PATH, body={"result": {}}, headers={})
    with pytest.raises(SetupError, match="no access token"):
        login(session, config, "customer")


def test_login_requires_configured_credentials(session, config):
    with pytest.raises(SetupError):
        login(session, config, "admin")
    assert session.calls == []


def test_customer_setup_keeps_only_approved_stores(session, config):
    session.add("POST", LOGIN_PATH, body={"result": {"accessToken": "tok"}})
    session.add("GET", STORES_PATH, body={"result": {"content": [
        {"id": "a", "status": "APPROVED"},
        {"id": "b", "status": "PENDING"},
    ]}})
    state = RunState()

    state.ensure_setup("customer", customer_setup(session, config))

    assert state.get_token("customer") == "tok"
    assert state.get_stores() == [{"id": "a", "status": "APPROVED"}]
    assert session.calls_to("GET", STORES_PATH)[0]["params"] == {"page": 0, "size": 50}


def test_setup_runs_once_per_role(session, config):
    session.add("POST", LOGIN_PATH, body={"accessToken": "tok"})
    session.add("GET", STORES_PATH, body=[])
    state = RunState()

    for _ in range(3):
        state.ensure_setup("customer", customer_setup(session, config))
    state.ensure_setup("owner", owner_setup(session, config))

    assert len(session.calls_to("POST", LOGIN_PATH)) == 2
    assert state.get_stores() == []
    assert state.get_token("owner") == "tok"


def test_failed_store_prefetch_is_fatal_and_remembered(session, config):
    session.add("POST", LOGIN_PATH, body={"accessToken": "tok"})
    session.add("GET", STORES_PATH, status_code=500, body={"error": "boom"})
    state = RunState()

    with pytest.raises(SetupError, match="Initial store fetch failed"):
        state.ensure_setup("customer", customer_setup(session, config))
    with pytest.raises(SetupError):
        state.ensure_setup("customer", customer_setup(session, config))

    assert len(session.calls_to("POST", LOGIN_PATH)) == 1


def test_reset_clears_run_state(session, config):
    state = RunState()
    state.set_token("customer", "tok")
    state.update_stores([{"id": "a"}])
    state.reset()

    assert state.get_token("customer") is None
    assert state.get_random_store() is None


def test_one_role_setup_does_not_wait_for_another():
    state = RunState()
    customer_started = threading.Event()
    release_customer = threading.Event()

    def slow_customer_setup(run_state):
        customer_started.set()
        release_customer.wait(timeout=5)
        run_state.set_token("customer", "slow")

    worker = threading.Thread(target=state.ensure_setup, args=("customer", slow_customer_setup))
    worker.start()
    try:
        assert customer_started.wait(timeout=5)
        state.ensure_setup("owner", lambda run_state: run_state.set_token("owner", "fast"))
        assert state.get_token("owner") == "fast"
        assert state.get_token("customer") is None
    finally:
        release_customer.set()
        worker.join(timeout=5)

    assert state.get_token("customer") == "slow"
