import asyncio
import os
from dataclasses import dataclass
from typing import Any

from .conditional import Condition, etag, evaluate, ifRangeMatches, lastModifiedSeconds
from .errors import ERROR_MESSAGE, ERROR_STATUS, IOFault, StaticError
from .headers import applyHook, cachingHeaders, contentHeaders, rangeHeaders
from .http.model import HTTPRequest, HTTPResponse
from .options import ServeConfig
from .ranges import NO_RANGE, Satisfiable, Unsatisfiable, selectRange
from .resolver import ResolvedTarget, TargetType, resolve
from .utils.logging import debug, error, logged
from .utils.uri import collapseLeadingSlashes, encodeURL

__doc__ = """
The dispatch controller, which turns a request into either a response
(a file, a redirect, a conditional or error status) or a `Fallthrough`,
telling the host to pass the request on to its next handler.

>    static = StaticFiles("public", maxAge="1h", extensions=["html"])
>    res = static.serve(HTTPRequest.Create("/about"))
>    if isinstance(res, Fallthrough):
>        ...
"""

# Methods a static file can be retrieved with
METHODS: tuple[str, ...] = ("GET", "HEAD")


@dataclass(slots=True, frozen=True)
class Fallthrough:
	"""The request was not handled, for the given reason."""

	error: StaticError
	path: str


class StaticFiles:
	"""Serves the files below a root directory, according to the given
	options (see `ServeConfig.Make`)."""

	def __init__(self, root: str | os.PathLike[str], **options: Any):
		self.config: ServeConfig = ServeConfig.Make(root, **options)

	def serve(
		self, request: HTTPRequest, path: str | None = None
	) -> HTTPResponse | Fallthrough:
		"""Serves the `request`. The `path` is the part of the request path
		relative to where the files are mounted, defaulting to the whole
		request path. Raises an `IOFault` on unexpected filesystem errors."""
		config = self.config
		original: str = request.path
		local: str = original if path is None else path
		if config.rewrite:
			original = config.rewrite(original)
			local = config.rewrite(local)
		method: str = request.method.upper()
		if method not in METHODS:
			if method == "OPTIONS" and not config.fallthrough:
				return request.methodNotAllowed(METHODS)
			return self.fallthrough(StaticError.MethodNotAllowed, local)
		try:
			target = resolve(local, config)
		except IOFault as e:
			error(e.message, e.errno, Path=str(e.path))
			raise e
		logged(debug) and debug(
			"Resolved",
			Path=local,
			Type=target.type.name,
			File=str(target.path) if target.path else None,
		)
		if target.type is TargetType.File:
			return self.send(request, target)
		elif target.type is TargetType.Directory:
			if not target.trailingSlash and config.redirect:
				return self.redirect(request, original)
			return self.reject(request, StaticError.NotFound, local)
		elif target.error is StaticError.Malformed:
			# The host decides what to answer for paths it can't decode
			return self.fallthrough(StaticError.Malformed, local)
		else:
			return self.reject(request, target.error or StaticError.NotFound, local)

	async def process(
		self, request: HTTPRequest, path: str | None = None
	) -> HTTPResponse | Fallthrough:
		"""Like `serve`, running the filesystem accesses in a worker thread."""
		return await asyncio.to_thread(self.serve, request, path)

	def send(self, request: HTTPRequest, target: ResolvedTarget) -> HTTPResponse:
		config = self.config
		info = target.info
		# NOTE: File targets always carry their info
		assert info is not None  # nosec: B101
		tag: str | None = etag(info) if config.etag else None
		modified: int | None = lastModifiedSeconds(info) if config.lastModified else None
		headers = contentHeaders(info, config, tag, modified)
		match evaluate(request, tag, modified):
			case Condition.PreconditionFailed:
				return request.preconditionFailed()
			case Condition.NotModified:
				return request.notModified(cachingHeaders(headers))
		selection = (
			selectRange(request.header("Range"), info.size, config.acceptRanges)
			if ifRangeMatches(request, tag, modified)
			else NO_RANGE
		)
		status: int = 200
		offset: int = 0
		size: int = info.size
		if isinstance(selection, Unsatisfiable):
			return request.rangeNotSatisfiable(selection.size)
		elif isinstance(selection, Satisfiable):
			window = selection.ranges[0]
			status, offset, size = 206, window.start, window.length
			headers |= rangeHeaders(window, info.size)
		headers = applyHook(headers, info, config)
		return request.respondFile(
			info.path,
			headers,
			status,
			headers.get("Content-Type"),
			offset=offset,
			size=size,
		)

	def redirect(self, request: HTTPRequest, path: str) -> HTTPResponse:
		"""Redirects to the directory's path with a trailing slash, keeping
		the query string."""
		location = encodeURL(collapseLeadingSlashes(f"{path}/"))
		if request.query:
			location = f"{location}?{request.query}"
		logged(debug) and debug("Redirecting", Path=path, Location=location)
		return request.redirect(location, permanent=True)

	def reject(
		self, request: HTTPRequest, reason: StaticError, path: str
	) -> HTTPResponse | Fallthrough:
		if self.config.fallthrough:
			return self.fallthrough(reason, path)
		return request.error(ERROR_STATUS[reason], ERROR_MESSAGE.get(reason))

	def fallthrough(self, reason: StaticError, path: str) -> Fallthrough:
		logged(debug) and debug("Fallthrough", Path=path, Reason=reason.name)
		return Fallthrough(reason, path)


# EOF
