import logging
from dataclasses import dataclass, field
from enum import StrEnum

import orjson
import structlog
from beartype import beartype

from staticdrop.core.settings import settings


class LoggerError(Exception):
    """Exception for logger related issues."""


class LogLevel(StrEnum):
    """LogLevel types for logger configuration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogIcon(StrEnum):
    """Icon mappings for file server log categories."""

    DEFAULT = "📋"

    # Status & Results
    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"

    # Lifecycle
    START = "🚀"
    PROCESSING = "🔄"
    COMPLETE = "✨"
    TOOL = "🔧"
    ADAPTER = "🔌"
    HEALTHCHECK = "❤️"

    # Requests
    NETWORK = "🌐"
    VALIDATION = "✓"

    # Files
    FOLDER = "📁"
    UPLOAD = "📤"
    DOWNLOAD = "📥"
    DATABASE = "💾"

    # Security
    SECURITY = "🔒"
    FORBIDDEN = "🚫"


@dataclass
class LoggerConfig:
    """Logger configuration derived from settings."""
    debug: bool = field(default_factory=lambda: settings.DEBUG)
    json_output: bool = field(default_factory=lambda: settings.ENVIRONMENT == "PROD")
    app_name: str = field(default_factory=lambda: settings.API_NAME)
    log_level: LogLevel = field(default=LogLevel.INFO)
    max_event_length: int = field(default=80)


class EventFormatter:
    """
    Normalize log event text.

    - Event messages are upper-cased and cut to ``max_length`` characters.
    - The ``icon`` kwarg, if given, must be a LogIcon member.
    - Icons are prepended only in debug mode.
    """

    def __init__(self, debug: bool, max_length: int = 80) -> None:
        self.debug = debug
        self.max_length = max_length

    @beartype
    def __call__(self, logger, name: str, event_dict: dict) -> dict:
        try:
            event = str(event_dict.get("event", ""))[: self.max_length].upper()
            icon = LogIcon(event_dict.pop("icon", LogIcon.DEFAULT))
        except ValueError as err:
            raise LoggerError("Wrong icon chosen, use a LogIcon member") from err

        event_dict["event"] = f"{icon.value} {event}" if self.debug else event
        return event_dict


def dev_pipeline_renderer(logger, name: str, event_dict: dict) -> str:
    """Render ``timestamp | LEVEL | EVENT | key=value ... | file:line``."""
    fields = dict(event_dict)
    head = [
        fields.pop("timestamp", ""),
        str(fields.pop("level", LogLevel.INFO.value)).upper(),
        fields.pop("event", ""),
    ]
    filename, lineno = fields.pop("filename", ""), fields.pop("lineno", "")
    extras = [f"{key}={value}" for key, value in fields.items()]
    location = [f"{filename}:{lineno}"] if filename else []
    return " | ".join(part for part in [*head, *extras, *location] if part)


def add_app_name(app_name: str):
    """Build a processor stamping every event with the service name."""

    def processor(logger, method_name: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", app_name)
        return event_dict

    return processor


def build_processors(config: LoggerConfig) -> list:
    """Shared processors plus the JSON (PROD) or pipe (DEV) renderer."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
            additional_ignores=["logger"]
        ),
        EventFormatter(debug=config.debug, max_length=config.max_event_length),
    ]

    if not config.json_output:
        return processors + [dev_pipeline_renderer]
    return processors + [
        add_app_name(config.app_name),
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(serializer=lambda obj, **kw: orjson.dumps(obj, **kw).decode()),
    ]


def setup_logging(config: LoggerConfig) -> None:
    """Configure structlog from ``config``."""
    structlog.configure(
        processors=build_processors(config),
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.log_level.value)),
        cache_logger_on_first_use=True,
    )


setup_logging(LoggerConfig())

logger = structlog.get_logger()
