# Structured logging built on structlog over the stdlib logging tree
import sys
import logging
import structlog
from typing import Optional, Any, Iterable

from core.config.settings import Settings

# Global flag to prevent duplicate logging configuration
_logging_configured = False

REDACTED = "[REDACTED]"


def make_redactor(keys: Iterable[str]):
    """Build a structlog processor that masks sensitive fields recursively."""
    keys_to_redact = {k.lower() for k in keys}

    def _redact(obj: Any) -> Any:
        if isinstance(obj, dict):
            out = {}
            for k, v in obj.items():
                if isinstance(k, str) and k.lower() in keys_to_redact:
                    out[k] = REDACTED
                else:
                    out[k] = _redact(v)
            return out
        if isinstance(obj, list):
            return [_redact(v) for v in obj]
        return obj

    def redact_sensitive(logger, name, event_dict):
        return _redact(event_dict)

    return redact_sensitive


def configure_logging(settings: Settings, force: bool = False) -> None:
    """Configure stdlib logging and structlog from settings."""
    global _logging_configured

    # Prevent duplicate configuration
    if _logging_configured and not force:
        return

    level = getattr(logging, settings.logging.level.upper())
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.logging.json_format
        else structlog.dev.ConsoleRenderer()
    )

    # stdout is reserved for command output; logs go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
        )
    )

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if getattr(existing, "_kite_gateway_handler", False):
            root_logger.removeHandler(existing)
    handler._kite_gateway_handler = True
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # httpx logs every request line at INFO, including query strings
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            make_redactor(settings.logging.redact_keys),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _logging_configured = True


def get_logger(name: str, component: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    logger = structlog.get_logger(name)
    if component:
        logger = logger.bind(component=component)
    return logger


__all__ = [
    "configure_logging",
    "get_logger",
    "make_redactor",
    "REDACTED",
]
