import os
import logging
import time

from locust import events
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from spot_loadtest.config.profiles import profile_for_environment
from spot_loadtest.telemetry.metrics import registry, ORDER_CREATE_ERRORS, PRICE_INTEGRITY_ERRORS

logger = logging.getLogger("monitoring")

otel_initialized = False


def setup_opentelemetry(config, environ=None):
    """Initialize OpenTelemetry tracing when OTEL_ENABLED and OTEL_ENDPOINT are set."""
    global otel_initialized

    if otel_initialized:
        return True
    if environ is None:
        environ = os.environ

    telemetry_enabled = environ.get("OTEL_ENABLED", "").lower() in ("true", "1", "yes")
    otel_endpoint = environ.get("OTEL_ENDPOINT")

    if not telemetry_enabled:
        logger.info("OpenTelemetry integration disabled (OTEL_ENABLED is not true)")
        return False
    if not otel_endpoint:
        logger.info("OpenTelemetry endpoint not configured (OTEL_ENDPOINT missing), integration disabled")
        return False

    service_name = environ.get("SERVICE_NAME", "spot-order-loadtest")
    tracer_provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
    trace.set_tracer_provider(tracer_provider)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otel_endpoint, insecure=True)))

    logger.info(f"OpenTelemetry initialized for service '{service_name}' with endpoint: {otel_endpoint}")
    otel_initialized = True
    _register_telemetry_handlers(config)
    return True


def _register_telemetry_handlers(config):
    tracer = trace.get_tracer(__name__)

    @events.request.add_listener
    def on_request(request_type, name, response_time, response_length, exception, **kwargs):
        with tracer.start_as_current_span(f"{request_type} {name}") as span:
            span.set_attribute("http.method", request_type)
            span.set_attribute("http.route", name)
            span.set_attribute("http.response_time_ms", response_time)
            if exception:
                span.set_attribute("error", True)
                span.set_attribute("error.message", str(exception))
            else:
                response = kwargs.get("response")
                if response is not None:
                    span.set_attribute("http.status_code", response.status_code)

    @events.test_start.add_listener
    def on_test_start(environment, **kwargs):
        with tracer.start_as_current_span("locust_test_start") as span:
            span.set_attribute("test.profile", profile_for_environment(environment, config)["name"])
            span.set_attribute("test.start_time", time.time())
            user_classes = getattr(environment, "user_classes", [])
            if user_classes:
                span.set_attribute("test.user_classes", ",".join(cls.__name__ for cls in user_classes))
            span.set_attribute("test.target_host", environment.host or "unknown")

    @events.test_stop.add_listener
    def on_test_stop(environment, **kwargs):
        with tracer.start_as_current_span("locust_test_stop") as span:
            span.set_attribute("test.end_time", time.time())
            stats = environment.stats
            if stats:
                span.set_attribute("test.total_requests", stats.total.num_requests)
                span.set_attribute("test.total_failures", stats.total.num_failures)
            span.set_attribute("test.order_create_error_rate", registry.rate(ORDER_CREATE_ERRORS).rate)
            span.set_attribute("test.price_integrity_error_rate", registry.rate(PRICE_INTEGRITY_ERRORS).rate)
