from email.utils import formatdate

from .metadata import FileInfo
from .options import ServeConfig
from .ranges import ByteRange
from .utils.files import contentType

# The headers a `304 Not Modified` keeps from the full response
CACHING_HEADERS: tuple[str, ...] = ("Last-Modified", "ETag", "Cache-Control")


def httpDate(timestamp: float) -> str:
	"""Formats the timestamp as an RFC 1123 date, like
	`Sun, 06 Nov 1994 08:49:37 GMT`."""
	return formatdate(timestamp, usegmt=True)


def cacheControl(config: ServeConfig) -> str | None:
	if not config.cacheControl:
		return None
	elif config.immutable and config.maxAge > 0:
		return f"public, max-age={config.maxAge}, immutable"
	else:
		return f"public, max-age={config.maxAge}"


def contentHeaders(
	info: FileInfo,
	config: ServeConfig,
	etag: str | None = None,
	lastModified: int | None = None,
) -> dict[str, str]:
	"""Builds the headers describing the file at `info`, in the order they
	are sent. The `etag` and `lastModified` are `None` when disabled."""
	headers: dict[str, str] = {"Content-Type": contentType(info.path)}
	if lastModified is not None:
		headers["Last-Modified"] = httpDate(lastModified)
	if etag is not None:
		headers["ETag"] = etag
	if cache_control := cacheControl(config):
		headers["Cache-Control"] = cache_control
	if config.acceptRanges:
		headers["Accept-Ranges"] = "bytes"
	return headers


def cachingHeaders(headers: dict[str, str]) -> dict[str, str]:
	return {k: v for k, v in headers.items() if k in CACHING_HEADERS}


def rangeHeaders(selection: ByteRange, size: int) -> dict[str, str]:
	return {"Content-Range": f"bytes {selection.start}-{selection.end}/{size}"}


def applyHook(
	headers: dict[str, str], info: FileInfo, config: ServeConfig
) -> dict[str, str]:
	"""Runs the `setHeaders` hook, which may update the headers in place
	or return new ones."""
	if config.setHeaders is None:
		return headers
	updated = config.setHeaders(headers, info)
	return headers if updated is None else dict(updated)


# EOF
