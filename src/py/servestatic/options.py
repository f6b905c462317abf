import math
import os
import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, TypeAlias

from .errors import ConfigurationError
from .metadata import FileInfo

__doc__ = """
The configuration of a static mount, resolved and validated once when the
mount is created, and immutable afterwards.
"""

# -----------------------------------------------------------------------------
#
# DURATIONS
#
# -----------------------------------------------------------------------------

ONE_YEAR: int = 60 * 60 * 24 * 365
MAX_AGE_LIMIT_MS: int = ONE_YEAR * 1000

DURATION_UNITS: dict[str, float] = {
	"ms": 1,
	"s": 1_000,
	"m": 60_000,
	"h": 3_600_000,
	"d": 86_400_000,
	"w": 604_800_000,
	"y": 31_557_600_000,
}

# Long forms accepted for each unit, like `2 days` or `1.5 hours`
DURATION_ALIASES: dict[str, str] = {
	"": "ms",
	"millisecond": "ms",
	"milliseconds": "ms",
	"msec": "ms",
	"msecs": "ms",
	"sec": "s",
	"secs": "s",
	"second": "s",
	"seconds": "s",
	"min": "m",
	"mins": "m",
	"minute": "m",
	"minutes": "m",
	"hr": "h",
	"hrs": "h",
	"hour": "h",
	"hours": "h",
	"day": "d",
	"days": "d",
	"week": "w",
	"weeks": "w",
	"yr": "y",
	"yrs": "y",
	"year": "y",
	"years": "y",
}

RE_DURATION = re.compile(r"^(-?(?:\d+)?\.?\d+) *([a-z]*)$", re.IGNORECASE)


def parseDuration(value: str) -> float:
	"""Parses a duration like `30d`, `1h`, `2 days` or `500` (milliseconds)
	and returns it in milliseconds."""
	match = RE_DURATION.match(value.strip()) if len(value) <= 100 else None
	unit: str | None = None
	if match:
		suffix = match.group(2).lower()
		unit = suffix if suffix in DURATION_UNITS else DURATION_ALIASES.get(suffix)
	if not match or unit is None:
		raise ConfigurationError(
			f"maxAge duration is invalid: {value!r}, expected a number of milliseconds or a duration like '30d' or '1h'"
		)
	return float(match.group(1)) * DURATION_UNITS[unit]


def maxAgeSeconds(value: Any) -> int:
	"""Normalizes a `maxAge` option (milliseconds, duration string or
	`timedelta`) to a number of seconds within `[0, ONE_YEAR]`."""
	ms: float
	if value is None:
		ms = 0
	elif isinstance(value, bool):
		raise ConfigurationError(f"maxAge must be a number or a duration, got: {value}")
	elif isinstance(value, (int, float)):
		if math.isnan(value):
			raise ConfigurationError("maxAge must be a number, got NaN")
		ms = value
	elif isinstance(value, timedelta):
		ms = value.total_seconds() * 1000
	elif isinstance(value, str):
		ms = parseDuration(value)
	else:
		raise ConfigurationError(
			f"maxAge must be a number or a duration, got: {type(value).__name__}"
		)
	return int(min(max(0, ms), MAX_AGE_LIMIT_MS) // 1000)


# -----------------------------------------------------------------------------
#
# CONFIGURATION
#
# -----------------------------------------------------------------------------


class Dotfiles(Enum):
	Allow = "allow"
	Deny = "deny"
	Ignore = "ignore"


TSetHeaders: TypeAlias = Callable[[dict[str, str], FileInfo], Optional[dict[str, str]]]
TRewrite: TypeAlias = Callable[[str], str]


def names(value: Any, option: str) -> tuple[str, ...]:
	"""Normalizes an option that is either disabled (`False`/`None`), a
	single name or a sequence of names."""
	if value is None or value is False:
		return ()
	items: Iterable[Any] = (value,) if isinstance(value, str) else value
	try:
		res = tuple(items)
	except TypeError:
		raise ConfigurationError(
			f"{option} must be a string, a list of strings or false, got: {value!r}"
		) from None
	for _ in res:
		if not isinstance(_, str) or not _:
			raise ConfigurationError(f"{option} contains an invalid name: {_!r}")
	return res


@dataclass(slots=True, frozen=True)
class ServeConfig:
	root: Path
	index: tuple[str, ...] = ("index.html",)
	extensions: tuple[str, ...] = ()
	dotfiles: Dotfiles = Dotfiles.Ignore
	fallthrough: bool = True
	redirect: bool = True
	acceptRanges: bool = True
	cacheControl: bool = True
	maxAge: int = 0
	immutable: bool = False
	lastModified: bool = True
	etag: bool = True
	setHeaders: TSetHeaders | None = None
	rewrite: TRewrite | None = None

	@staticmethod
	def Make(
		root: str | os.PathLike[str] | None,
		*,
		acceptRanges: bool = True,
		cacheControl: bool = True,
		dotfiles: str | Dotfiles = Dotfiles.Ignore,
		etag: bool = True,
		extensions: str | Iterable[str] | bool | None = False,
		fallthrough: bool = True,
		immutable: bool = False,
		index: str | Iterable[str] | bool | None = ("index.html",),
		lastModified: bool = True,
		maxAge: int | float | str | timedelta | None = 0,
		redirect: bool = True,
		setHeaders: TSetHeaders | None = None,
		rewrite: TRewrite | None = None,
	) -> "ServeConfig":
		"""Validates the given options and creates the configuration,
		raising a `ConfigurationError` for anything invalid."""
		if root is None or root == "":
			raise ConfigurationError("root path required")
		if not isinstance(root, (str, os.PathLike)):
			raise ConfigurationError(
				f"root path must be a string, got: {type(root).__name__}"
			)
		if setHeaders is not None and not callable(setHeaders):
			raise ConfigurationError("setHeaders option must be a function")
		if rewrite is not None and not callable(rewrite):
			raise ConfigurationError("rewrite option must be a function")
		try:
			dotfiles_policy = (
				dotfiles if isinstance(dotfiles, Dotfiles) else Dotfiles(dotfiles)
			)
		except ValueError:
			raise ConfigurationError(
				f"dotfiles option must be one of 'allow', 'deny' or 'ignore', got: {dotfiles!r}"
			) from None
		return ServeConfig(
			root=Path(os.path.abspath(root)),
			index=("index.html",) if index is True else names(index, "index"),
			extensions=tuple(
				_.lstrip(".") for _ in names(extensions, "extensions") if _.lstrip(".")
			),
			dotfiles=dotfiles_policy,
			fallthrough=bool(fallthrough),
			redirect=bool(redirect),
			acceptRanges=bool(acceptRanges),
			cacheControl=bool(cacheControl),
			maxAge=maxAgeSeconds(maxAge),
			immutable=bool(immutable),
			lastModified=bool(lastModified),
			etag=bool(etag),
			setHeaders=setHeaders,
			rewrite=rewrite,
		)


# EOF
