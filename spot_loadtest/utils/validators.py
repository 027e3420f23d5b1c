import logging
from typing import List, Callable, Union

logger = logging.getLogger("validators")


def validate_response(response, checks: List[Callable]) -> bool:
    """
    Run every check against the response; all must pass.

    The first failing check's message is reported to Locust through
    ``response.failure`` so the request shows up as failed in the stats.
    """
    success = True
    for check in checks:
        try:
            message = check(response)
        except Exception as e:
            logger.error(f"Validation error: {e}")
            message = f"Validation error: {e}"
        if message:
            if success:
                response.failure(message)
            success = False
    return success


def check_status_code(expected_codes: Union[int, List[int]]) -> Callable:
    codes = expected_codes if isinstance(expected_codes, (list, tuple, set)) else [expected_codes]

    def _check(response):
        if response.status_code not in codes:
            return f"Expected status to be one of {list(codes)}, got {response.status_code}"
        return None
    return _check


def check_response_time(max_ms: float) -> Callable:
    def _check(response):
        elapsed_ms = response_time_ms(response)
        if elapsed_ms >= max_ms:
            return f"Response time {elapsed_ms:.0f}ms exceeded {max_ms}ms"
        return None
    return _check


def response_time_ms(response) -> float:
    """Request duration as Locust measured it (body download included), else ``elapsed``."""
    request_meta = getattr(response, "request_meta", None)
    if request_meta and request_meta.get("response_time") is not None:
        return float(request_meta["response_time"])
    elapsed = getattr(response, "elapsed", None)
    if elapsed is None:
        return 0.0
    return elapsed.total_seconds() * 1000
