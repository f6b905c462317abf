import re
from email.utils import parsedate_to_datetime
from enum import Enum

from .http.model import HTTPRequest
from .metadata import FileInfo

__doc__ = """
Evaluation of the conditional request headers (`If-Match`,
`If-Unmodified-Since`, `If-None-Match`, `If-Modified-Since` and `If-Range`)
against the validators of the file about to be sent.

SEE: https://www.rfc-editor.org/rfc/rfc9110#section-13.2.2
"""

# Matches a `no-cache` directive within a `Cache-Control` header
RE_NO_CACHE = re.compile(r"(?:^|,)\s*no-cache\s*(?:,|$)", re.IGNORECASE)


class Condition(Enum):
	Proceed = "proceed"
	NotModified = "notmodified"
	PreconditionFailed = "preconditionfailed"


# -----------------------------------------------------------------------------
#
# VALIDATORS
#
# -----------------------------------------------------------------------------


def etag(info: FileInfo) -> str:
	"""A weak entity tag derived from the size and the modification time,
	which stays the same as long as the file is not changed."""
	return f'W/"{info.size:x}-{int(info.mtime * 1000):x}"'


def lastModifiedSeconds(info: FileInfo) -> int:
	# HTTP dates have a one second resolution
	return int(info.mtime)


def parseHTTPDate(value: str | None) -> float | None:
	"""Parses an HTTP date, returning a timestamp or `None` when the value
	is missing or invalid."""
	if not value:
		return None
	try:
		return parsedate_to_datetime(value).timestamp()
	except (TypeError, ValueError, IndexError):
		return None


def parseETags(value: str) -> list[str]:
	return [_.strip() for _ in value.split(",") if _.strip()]


def weakTag(tag: str) -> str:
	return tag[2:] if tag.startswith("W/") else tag


def matchesETag(header: str, tag: str | None) -> bool:
	"""Tells if the list of entity tags in `header` matches `tag`, using
	the weak comparison."""
	tags = parseETags(header)
	if "*" in tags:
		return True
	elif tag is None:
		return False
	else:
		opaque = weakTag(tag)
		return any(weakTag(_) == opaque for _ in tags)


# -----------------------------------------------------------------------------
#
# EVALUATION
#
# -----------------------------------------------------------------------------


def evaluate(
	request: HTTPRequest, etag: str | None, lastModified: int | None
) -> Condition:
	"""Evaluates the request preconditions against the `etag` and
	`lastModified` (in seconds) the response would carry, either being
	`None` when disabled."""
	if_match = request.header("If-Match")
	if if_match is not None:
		if not matchesETag(if_match, etag):
			return Condition.PreconditionFailed
	else:
		unmodified_since = parseHTTPDate(request.header("If-Unmodified-Since"))
		if unmodified_since is not None and (
			lastModified is None or lastModified > unmodified_since
		):
			return Condition.PreconditionFailed
	# A client forcing an end-to-end revalidation always gets the content
	cache_control = request.header("Cache-Control")
	if cache_control and RE_NO_CACHE.search(cache_control):
		return Condition.Proceed
	if_none_match = request.header("If-None-Match")
	if if_none_match is not None:
		return (
			Condition.NotModified
			if matchesETag(if_none_match, etag)
			else Condition.Proceed
		)
	modified_since = parseHTTPDate(request.header("If-Modified-Since"))
	if (
		modified_since is not None
		and lastModified is not None
		and lastModified <= modified_since
	):
		return Condition.NotModified
	return Condition.Proceed


def ifRangeMatches(
	request: HTTPRequest, etag: str | None, lastModified: int | None
) -> bool:
	"""Tells if the `Range` header should be honoured given the request's
	`If-Range`, which holds either an entity tag or an HTTP date."""
	if_range = request.header("If-Range")
	if not if_range:
		return True
	elif '"' in if_range:
		return etag is not None and etag in if_range
	else:
		date = parseHTTPDate(if_range)
		return date is not None and lastModified is not None and lastModified == date


# EOF
