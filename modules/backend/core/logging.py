"""
Logging Setup.

structlog on top of the stdlib logging module, configured from
config/settings/logging.yaml. Modules never create their own loggers:

    logger = get_logger(__name__)
    logger.info("Uploaded file to CDN", extra={"path": path, "size": len(data)})

Fields passed in `extra` are merged into the record, so JSON lines read
{"event": "Uploaded file to CDN", "path": ..., "size": ...}. Every record
also carries timestamp, level, logger, func_name and lineno, plus
trace_id and span_id while an OpenTelemetry span is recording.

Inside an HTTP request the middleware binds request_id, frontend, method
and path. Entry points outside a request (taskiq worker, run.py commands)
call bind_source() so records in logs/system.jsonl can be filtered by origin.
"""

import logging
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from opentelemetry import trace
from structlog.typing import EventDict, Processor, WrappedLogger

from modules.backend.core.config import find_project_root, load_yaml_config
from modules.backend.core.config_schema import FileHandlerSchema, LoggingSchema

VALID_SOURCES = frozenset({
    "web",
    "mobile",
    "api",
    "tasks",
    "cli",
    "integrations",
    "internal",
    "unknown",
})


@lru_cache
def load_logging_config() -> LoggingSchema:
    """Validated contents of logging.yaml."""
    return LoggingSchema(**load_yaml_config("logging.yaml"))


def merge_extra(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Lift the stdlib-style `extra={...}` argument into top-level fields."""
    extra = event_dict.pop("extra", None)
    if isinstance(extra, dict):
        for key, value in extra.items():
            event_dict.setdefault(key, value)
    return event_dict


def add_trace_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach trace_id and span_id when a recording span is active."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        merge_extra,
        add_trace_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _file_handler(config: FileHandlerSchema, formatter: logging.Formatter) -> logging.Handler:
    log_path = find_project_root() / config.path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Arguments override the matching logging.yaml values.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: "console" (colored, for development) or "json"
        enable_console: Write records to stdout
        enable_file_logging: Write JSON lines to the rotating log file
    """
    config = load_logging_config()
    log_level = getattr(logging, (level or config.level).upper())
    effective_format = format_type or config.format
    console_enabled = config.handlers.console.enabled if enable_console is None else enable_console
    file_enabled = config.handlers.file.enabled if enable_file_logging is None else enable_file_logging

    shared_processors = _shared_processors()
    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(ensure_ascii=False),
        foreign_pre_chain=shared_processors,
    )
    if effective_format == "console":
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared_processors,
        )
    else:
        console_formatter = json_formatter

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if file_enabled:
        root_logger.addHandler(_file_handler(config.handlers.file, json_formatter))

    for name, quiet_level in config.quiet_loggers.items():
        logging.getLogger(name).setLevel(getattr(logging, quiet_level.upper()))


def get_logger(name: str) -> Any:
    """Structlog logger for a module, typically get_logger(__name__)."""
    return structlog.get_logger(name)


def bind_source(source: str) -> None:
    """
    Tag every following record in this context with `source`.

    Raises:
        ValueError: If source is not one of VALID_SOURCES
    """
    if source not in VALID_SOURCES:
        raise ValueError(f"Unknown log source: {source}")
    structlog.contextvars.bind_contextvars(source=source)
