import logging
import sys

import sentry_sdk
import structlog
from asgi_correlation_id.context import correlation_id
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

from .config import Settings, get_settings

# Context keys mirrored onto the Sentry scope so errors can be traced to a user's plan
SENTRY_TAGGED_KEYS = ("correlation_id", "user_id", "plan_instance_id")

DEV_ENVIRONMENTS = {"local", "dev", "development"}


def bind_plan_context(**fields) -> None:
    """Attach request-scoped identifiers (user, plan instance) to every following log line."""
    bind_contextvars(**{key: value for key, value in fields.items() if value is not None})


def reset_plan_context() -> None:
    clear_contextvars()


def add_service_fields(service_name: str, environment: str):
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("env", environment)
        return event_dict

    return processor


def add_correlation_id(logger, method_name, event_dict):
    cid = correlation_id.get(None)
    if cid is not None:
        event_dict["correlation_id"] = cid
    return event_dict


def tag_sentry_scope(logger, method_name, event_dict):
    for key in SENTRY_TAGGED_KEYS:
        value = event_dict.get(key)
        if value is not None:
            sentry_sdk.set_tag(key, str(value))
    return event_dict


def _init_sentry(settings: Settings) -> None:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
    )
    sentry_sdk.set_tag("service", settings.SERVICE_NAME)


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.SENTRY_DSN:
        _init_sentry(settings)

    processors = [
        merge_contextvars,
        add_service_fields(settings.SERVICE_NAME, settings.ENVIRONMENT),
        add_correlation_id,
        tag_sentry_scope,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if settings.DEBUG or settings.ENVIRONMENT in DEV_ENVIRONMENTS:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level, force=True)

    structlog.configure(
        processors=processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
