import logging
from typing import Dict, Any, Optional

from spot_loadtest.config.config_loader import build_path
from spot_loadtest.exceptions import SetupError
from spot_loadtest.utils.response_parser import read_json, unwrap_result

logger = logging.getLogger("auth")


def auth_headers(access_token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
    }


def extract_access_token(response) -> Optional[str]:
    """Find the access token in a login response body, or in its Authorization header."""
    body = unwrap_result(read_json(response, logger))
    if isinstance(body, dict):
        token = body.get("accessToken") or body.get("access_token")
        if token:
            return token

    header = response.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[len("bearer "):].strip()
    return None


def login(client, config: Dict[str, Any], role: str) -> str:
    """
    Log in as the configured user for ``role`` and return its access token.

    Raises:
        SetupError: if credentials are missing or the login call fails
    """
    credentials = config.get("credentials", {}).get(role)
    if not credentials or not credentials.get("username"):
        raise SetupError(f"No credentials configured for role '{role}'")

    with client.post(
        build_path(config, "login"),
        json={"username": credentials["username"], "password": credentials.get("password", "")},
        name="POST /auth/login",
        catch_response=True,
    ) as response:
        if response.status_code != 200:
            response.failure(f"Login failed for {role}: {response.status_code}")
            raise SetupError(f"{role.capitalize()} login failed ({response.status_code}). Check credentials and BASE_URL.")

        token = extract_access_token(response)
        if not token:
            response.failure(f"Login response for {role} carried no access token")
            raise SetupError(f"{role.capitalize()} login returned no access token")

    logger.info(f"Logged in as {role} ({credentials['username']})")
    return token
