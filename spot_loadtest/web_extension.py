"""
Routes added to the Locust web UI for the order load tests.

GET /order-metrics  custom metric summaries plus the active profile's threshold verdicts
GET /profile        the active traffic profile (stages and thresholds)
"""
import logging

from flask import jsonify

from spot_loadtest.config.profiles import profile_for_environment, total_duration
from spot_loadtest.exceptions import UnknownProfileError
from spot_loadtest.telemetry.metrics import registry
from spot_loadtest.telemetry.thresholds import evaluate_thresholds

logger = logging.getLogger("web_extension")


def init_web_ui_extension(environment, config):
    """
    Initialize custom web UI extension
    """
    # Skip if we're not running in web UI mode
    if not environment.web_ui:
        return

    app = environment.web_ui.app

    @app.route("/order-metrics", methods=["GET"])
    def order_metrics():
        payload = {"metrics": registry.snapshot()}
        try:
            profile = profile_for_environment(environment, config)
        except UnknownProfileError as e:
            payload["error"] = str(e)
            return jsonify(payload), 400

        results = evaluate_thresholds(profile["thresholds"], registry)
        payload["profile"] = profile["name"]
        payload["thresholds"] = results
        payload["passed"] = all(result["passed"] for result in results)
        return jsonify(payload)

    @app.route("/profile", methods=["GET"])
    def active_profile():
        try:
            profile = profile_for_environment(environment, config)
        except UnknownProfileError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify(dict(profile, total_duration=total_duration(profile)))

    logger.info("Registered /order-metrics and /profile web UI routes")
