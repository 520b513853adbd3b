"""JSON logging with request-scoped context for the discovery service."""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from rosematch.settings import settings

_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("obs_context", default={})

_LOGGER_NAME = "rosematch"

# Profile content and credentials never reach the log stream.
_REDACTED_FIELDS = ("token", "secret", "authorization", "password", "email", "phone", "bio", "location", "images")

_MAX_STRING_LENGTH = 256
_MAX_ITEMS = 10

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message"}


def bind_context(**fields: Optional[str]) -> Token:
	"""Layer ``fields`` (request_id, route, user_id, ...) over the current context."""
	merged = dict(_CONTEXT.get())
	merged.update({key: value for key, value in fields.items() if value is not None})
	return _CONTEXT.set(merged)


def reset_context(token: Token) -> None:
	_CONTEXT.reset(token)


def current_request_id(default: str = "unknown") -> str:
	return _CONTEXT.get().get("request_id") or default


def _scrub(key: str, value: Any) -> Any:
	if any(marker in key.lower() for marker in _REDACTED_FIELDS):
		return "[redacted]"
	if isinstance(value, str) and len(value) > _MAX_STRING_LENGTH:
		return value[:_MAX_STRING_LENGTH] + "…"
	if isinstance(value, (list, tuple, set, frozenset)):
		items = [_scrub(key, item) for item in list(value)[:_MAX_ITEMS]]
		if len(value) > _MAX_ITEMS:
			items.append("…")
		return items
	return value


class JSONLogFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
		}
		payload.update(_CONTEXT.get())
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in record.__dict__.items():
			if key not in _RECORD_ATTRS and key not in payload:
				payload[key] = _scrub(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Keep a sample of info lines; everything else passes."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		return random.random() < settings.obs_log_sampling_rate_info


def configure_logging() -> logging.Logger:
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers[:] = [handler]
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
