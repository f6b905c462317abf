import sys
import time
from contextvars import ContextVar
from enum import Enum
from pathlib import PurePath
from typing import Any, Callable, NamedTuple, TextIO, TypeAlias

from ..config import LOG_LEVEL
from .term import Term

__doc__ = """
Structured logging for the engine. Every entry is a message with ad-hoc
keyword context, rendered on stderr as `[origin] message Key=value …`.
The `logged` guard tells if a logging function is enabled at the current
level, so that callers can skip building expensive context:

>    logged(debug) and debug("Resolved", Path=path, Type=target.type.name)
"""

# The component an entry comes from, unless given explicitly
LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="servestatic")

TContext: TypeAlias = str | int | float | bool | PurePath | Enum | None


class LogType(Enum):
	Message = 0
	Event = 20  # Something that happened, like a request being served


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # Reported and handled


LOG_LEVELS: dict[str, LogLevel] = {
	"debug": LogLevel.Debug,
	"info": LogLevel.Info,
	"warning": LogLevel.Warning,
	"error": LogLevel.Error,
}

# 256 colors terminal palette
LOG_LEVEL_COLOR: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
}

THRESHOLD: LogLevel = LOG_LEVELS.get(LOG_LEVEL, LogLevel.Info)

# Where entries are written
SINK: TextIO = sys.stderr


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: Any = None
	context: dict[str, TContext] | None = None


def formatData(value: Any) -> str:
	"""Renders a context value compactly, quoting strings with spaces."""
	if value is None or value == "" or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, Enum):
		return value.name
	elif isinstance(value, PurePath):
		return formatData(str(value))
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, float):
		return f"{value:0.2f}"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.NORMAL}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, (list, tuple)):
		return ",".join(formatData(_) for _ in value)
	else:
		return str(value)


def render(entry: LogEntry) -> str:
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	origin: str = f"{clr}{Term.BOLD}[{entry.origin}]"
	context: str = formatData(entry.context) if entry.context else ""
	if entry.type is LogType.Event:
		head = f"{origin} {entry.name}{Term.RESET} {formatData(entry.value)}"
	else:
		head = f"{origin}{Term.RESET} {entry.message}"
	return f"{head} {context}{Term.RESET}\n" if context else f"{head}{Term.RESET}\n"


def send(entry: LogEntry) -> LogEntry:
	if entry.level.value >= THRESHOLD.value:
		SINK.write(render(entry))
		SINK.flush()
	return entry


def entry(
	message: str | None = None,
	*,
	origin: str | None = None,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	name: str | None = None,
	value: Any = None,
	context: dict[str, TContext] | None = None,
) -> LogEntry:
	return LogEntry(
		origin or LogOrigin.get(),
		time.time(),
		type,
		level,
		message,
		name,
		value,
		context,
	)


# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------


def debug(message: str, *, origin: str | None = None, **context: TContext) -> LogEntry:
	return send(entry(message, level=LogLevel.Debug, origin=origin, context=context))


def info(message: str, *, origin: str | None = None, **context: TContext) -> LogEntry:
	return send(entry(message, origin=origin, context=context))


def warning(
	message: str, *, origin: str | None = None, **context: TContext
) -> LogEntry:
	return send(entry(message, level=LogLevel.Warning, origin=origin, context=context))


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	**context: TContext,
) -> LogEntry:
	"""Logs a handled error, `code` being an errno or an error name."""
	return send(
		entry(
			message,
			level=LogLevel.Error,
			origin=origin,
			value=code,
			context=context | {"Code": code},
		)
	)


def event(
	name: str,
	value: Any = None,
	*,
	origin: str | None = None,
	**context: TContext,
) -> LogEntry:
	return send(
		entry(
			type=LogType.Event, name=name, value=value, origin=origin, context=context
		)
	)


LOGGED_LEVELS: dict[Callable[..., Any], LogLevel] = {
	debug: LogLevel.Debug,
	info: LogLevel.Info,
	event: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
}


def logged(item: Callable[..., Any]) -> bool:
	"""Tells if the given logging function currently produces output."""
	return LOGGED_LEVELS.get(item, LogLevel.Info).value >= THRESHOLD.value


# EOF
