from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar

from ..utils.files import contentType as getContentType
from ..utils.htmpl import H, document
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------

# --
# == HTTP Request Response API
#
# Defines the high level API functions (orthogonal to the underlying model)
# to create responses from a request.

HTML_TYPE: str = "text/html; charset=UTF-8"

# Headers sent along the HTML pages the engine generates itself
PAGE_HEADERS: dict[str, str] = {
	"Content-Security-Policy": "default-src 'self'",
	"X-Content-Type-Options": "nosniff",
}


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def empty(
		self,
		status: int = 200,
		headers: dict[str, str] | None = None,
	) -> T:
		"""An response with no content, and a zero `Content-Length`."""
		return self.respond(
			content=None,
			contentLength=0,
			status=status,
			headers=headers,
		)

	def error(
		self,
		status: int,
		content: str | None = None,
		headers: dict[str, str] | None = None,
	) -> T:
		"""Responds with a minimal HTML error page, displaying the given
		`content` or the status message."""
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=document("Error", message if content is None else content),
			contentType=HTML_TYPE,
			status=status,
			message=message,
			headers=PAGE_HEADERS | headers if headers else PAGE_HEADERS,
		)

	def notModified(self, headers: dict[str, str] | None = None) -> T:
		# SEE: https://www.rfc-editor.org/rfc/rfc9110#status.304
		return self.respond(content=None, status=304, headers=headers)

	def preconditionFailed(self, headers: dict[str, str] | None = None) -> T:
		return self.empty(412, headers)

	def rangeNotSatisfiable(
		self, size: int, headers: dict[str, str] | None = None
	) -> T:
		range_headers = {"Content-Range": f"bytes */{size}"}
		return self.empty(416, headers | range_headers if headers else range_headers)

	def methodNotAllowed(self, allow: tuple[str, ...] = ("GET", "HEAD")) -> T:
		return self.empty(405, {"Allow": ", ".join(allow)})

	def redirect(self, url: str, permanent: bool = False) -> T:
		"""Redirects to the given (already URL-encoded) location, with an HTML
		body linking to it for clients that don't follow `Location`."""
		# SEE: https://developer.mozilla.org/en-US/docs/Web/HTTP/Redirections
		return self.respond(
			content=document("Redirecting", "Redirecting to ", H.a(url, href=url)),
			contentType=HTML_TYPE,
			status=301 if permanent else 302,
			headers=PAGE_HEADERS | {"Location": url},
		)

	def respondFile(
		self,
		path: Path | str,
		headers: dict[str, str] | None = None,
		status: int = 200,
		contentType: str | None = None,
		*,
		offset: int = 0,
		size: int | None = None,
	) -> T:
		"""Responds with the contents of the file at `path`, restricted to
		`size` bytes from `offset` when given."""
		# NOTE: Imported here as the model depends on this module
		from .model import HTTPBodyFile

		p: Path = path if isinstance(path, Path) else Path(path)
		body = HTTPBodyFile(p.absolute(), offset, size)
		base_headers = {"Content-Type": contentType or getContentType(p)}
		return self.respond(
			content=body,
			contentLength=body.length,
			status=status,
			headers=base_headers | headers if headers else base_headers,
		)


# EOF
