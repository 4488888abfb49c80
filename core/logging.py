"""JSON logging for compliance engine runs.

Every record carries the organization being evaluated and the requirement
catalog version in use, so the output of concurrent runs can be told apart.
"""
from __future__ import annotations

import json
import logging
import logging.config
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseSettings):
    """Logging configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    # stdout, stderr or a file path
    sink: str = Field(default="stdout", alias="LOG_SINK")
    json_indent: Optional[int] = Field(default=None, alias="LOG_JSON_INDENT")
    timestamp_format: str = Field(default="iso", alias="LOG_TIMESTAMP_FORMAT")

    @property
    def normalized_level(self) -> str:
        return self.level.upper()


@dataclass(frozen=True)
class EvaluationContext:
    organization_id: str
    catalog_version: Optional[str] = None


_EVALUATION: ContextVar[Optional[EvaluationContext]] = ContextVar("evaluation_context", default=None)
_ADAPTER_KEYWORDS = {"exc_info", "stack_info", "stacklevel", "extra"}


@contextmanager
def evaluation_context(organization_id: str, catalog_version: Optional[str] = None) -> Iterator[EvaluationContext]:
    """Tag every record logged inside the block with the organization under evaluation."""

    context = EvaluationContext(organization_id=organization_id, catalog_version=catalog_version)
    token = _EVALUATION.set(context)
    try:
        yield context
    finally:
        _EVALUATION.reset(token)


def current_evaluation() -> Optional[EvaluationContext]:
    return _EVALUATION.get()


class JSONFormatter(logging.Formatter):
    """One JSON object per record: event name, evaluation fields, then event data."""

    def __init__(self, *, indent: Optional[int] = None, timestamp_format: str = "iso") -> None:
        super().__init__()
        self.indent = indent
        self.timestamp_format = timestamp_format

    def _timestamp(self, created: float) -> str:
        moment = datetime.fromtimestamp(created, tz=timezone.utc)
        return moment.isoformat() if self.timestamp_format == "iso" else moment.strftime(self.timestamp_format)

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self._timestamp(record.created),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }

        evaluation = _EVALUATION.get()
        if evaluation is not None:
            payload["organization_id"] = evaluation.organization_id
            payload["catalog_version"] = evaluation.catalog_version

        payload.update(getattr(record, "event_data", None) or {})

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, indent=self.indent, default=str)


def build_logging_config(config: LoggingConfig) -> Dict[str, Any]:
    """dictConfig schema routing the root logger to the configured sink."""

    sink = config.sink.strip()
    if sink.lower() in ("stdout", "stderr"):
        handler: Dict[str, Any] = {"class": "logging.StreamHandler", "stream": f"ext://sys.{sink.lower()}"}
    else:
        handler = {"class": "logging.FileHandler", "filename": str(Path(sink).expanduser()), "delay": True}
    handler.update(level=config.normalized_level, formatter="json")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JSONFormatter,
                "indent": config.json_indent,
                "timestamp_format": config.timestamp_format,
            }
        },
        "handlers": {"engine": handler},
        "root": {"handlers": ["engine"], "level": config.normalized_level},
    }


def setup_logging(config: Optional[LoggingConfig] = None, *, force: bool = False) -> LoggingConfig:
    """Install JSON logging once per process; ``force`` reapplies a new configuration."""

    config = config or LoggingConfig()
    root = logging.getLogger()
    if not force and any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        return config

    sink = config.sink.strip()
    if sink.lower() not in ("stdout", "stderr"):
        Path(sink).expanduser().parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(config))
    return config


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter taking event data as keyword arguments: ``logger.info("event", key=value)``."""

    def __init__(self, logger: logging.Logger) -> None:
        super().__init__(logger, {})

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple[Any, Dict[str, Any]]:
        event_data = {key: kwargs.pop(key) for key in list(kwargs) if key not in _ADAPTER_KEYWORDS}
        extra = dict(kwargs.get("extra") or {})
        extra["event_data"] = event_data
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: Optional[str] = None) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name))


__all__ = [
    "LoggingConfig",
    "EvaluationContext",
    "JSONFormatter",
    "StructuredLogger",
    "build_logging_config",
    "current_evaluation",
    "evaluation_context",
    "get_logger",
    "setup_logging",
]
