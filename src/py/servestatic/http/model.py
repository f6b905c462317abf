import asyncio
import os.path
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, Literal, NamedTuple, TypeAlias, TypeVar

from ..config import READ_SIZE
from ..errors import HTTPRequestError, IOFault  # NOQA: F401
from ..utils.io import DEFAULT_ENCODING, readWindow
from ..utils.logging import error
from .api import ResponseFactory
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------

# Header names that don't follow the `Kebab-Case` convention
HEADER_NAMES: dict[str, str] = {
	"etag": "ETag",
	"www-authenticate": "WWW-Authenticate",
}

# Most normalized header names that are memoized
HEADER_NAMES_CACHE: int = 256


@lru_cache(maxsize=HEADER_NAMES_CACHE)
def headername(name: str) -> str:
	"""Normalizes the header name as `Kebab-Case`. Requests may carry any
	header name, so the memo is bounded."""
	key: str = name.lower()
	return HEADER_NAMES.get(key) or "-".join(_.capitalize() for _ in key.split("-"))


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keeping key information for response/request processing."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None

	@staticmethod
	def Make(headers: "dict[str, str] | HTTPHeaders | None") -> "HTTPHeaders":
		"""Creates headers from a plain mapping, normalizing the names."""
		if isinstance(headers, HTTPHeaders):
			return headers
		normalized: dict[str, str] = (
			{headername(k): v for k, v in headers.items()} if headers else {}
		)
		length: str | None = normalized.get("Content-Length")
		return HTTPHeaders(
			normalized,
			contentType=normalized.get("Content-Type"),
			contentLength=int(length) if length and length.isdigit() else None,
		)


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""Represents a body as bytes."""

	payload: bytes = b""
	length: int = 0

	@staticmethod
	def FromBytes(data: bytes) -> "HTTPBodyBlob":
		return HTTPBodyBlob(payload=data, length=len(data))


class HTTPBodyFile(NamedTuple):
	"""Represents an HTTP body read from a file, possibly restricted to the
	window of `size` bytes starting at `offset`."""

	path: Path
	offset: int = 0
	size: int | None = None

	@property
	def length(self) -> int:
		return (
			self.size
			if self.size is not None
			else max(0, self.path.stat().st_size - self.offset)
		)


# The different types of bodies that are managed
THTTPBody: TypeAlias = HTTPBodyBlob | HTTPBodyFile


def fileFault(path: Path, cause: OSError) -> IOFault:
	"""Logs and returns the fault for a file body that can't be read, which
	happens when it changes between the stat and the send."""
	fault = IOFault(path, cause)
	error(fault.message, fault.errno, Path=str(path))
	return fault


def readChunk(chunks: Iterator[bytes], path: Path) -> bytes:
	try:
		return next(chunks, b"")
	except OSError as e:
		raise fileFault(path, e) from e


class HTTPBodyWriter(ABC):
	"""A sink for response bodies. Subclasses implement `_writeBytes`, which
	is awaited for every chunk: a file body is only read further once the
	sink has accepted the previous chunk."""

	__slots__ = ["readSize", "written"]

	def __init__(self, readSize: int = READ_SIZE) -> None:
		self.readSize: int = readSize
		self.written: int = 0

	async def write(self, body: THTTPBody | bytes | None) -> bool:
		"""Writes the given type of body."""
		if isinstance(body, bytes):
			return await self._write(body)
		elif isinstance(body, HTTPBodyBlob):
			return await self._write(body.payload)
		elif isinstance(body, HTTPBodyFile):
			return await self._writeFile(body)
		elif body is None:
			return True
		else:
			raise ValueError(f"Unsupported body format: {body}")

	async def _writeFile(self, body: HTTPBodyFile) -> bool:
		# The file is closed on every exit path, including when the task
		# writing it is cancelled.
		try:
			length: int = body.length
			f = open(body.path, "rb")
		except OSError as e:
			raise fileFault(body.path, e) from e
		with f:
			chunks = readWindow(f, body.offset, length, self.readSize)
			while chunk := await asyncio.to_thread(readChunk, chunks, body.path):
				await self._write(chunk, True)
		await self._write(b"", False)
		return True

	async def _write(self, chunk: bytes, more: bool = False) -> bool:
		self.written += len(chunk)
		return await self._writeBytes(chunk, more)

	@abstractmethod
	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		...


class BytesBodyWriter(HTTPBodyWriter):
	"""Collects the body in memory, which is mostly useful for testing and
	for small payloads."""

	__slots__ = ["data"]

	def __init__(self, readSize: int = READ_SIZE) -> None:
		super().__init__(readSize)
		self.data: bytearray = bytearray()

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		if chunk:
			self.data += chunk
		return True

	@property
	def value(self) -> bytes:
		return bytes(self.data)


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""Represents an HTTP requests, which also acts as a factory for
	responses. The `path` is kept as received (it may or may not be
	percent-encoded) and the `query` is the raw query string."""

	@staticmethod
	def Create(
		url: str,
		method: str = "GET",
		headers: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPRequest":
		"""Creates a request from a request target like `/path?query`."""
		path, _, query = url.partition("?")
		return HTTPRequest(
			method,
			path,
			query or None,
			HTTPHeaders.Make(headers),
			protocol=protocol,
		)

	def __init__(
		self,
		method: str,
		path: str,
		query: str | None,
		headers: HTTPHeaders | dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: str | None = query
		self.protocol: str = protocol
		self._headers: HTTPHeaders = HTTPHeaders.Make(headers)

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	def header(self, name: str) -> str | None:
		return self._headers.headers.get(headername(name))

	@property
	def url(self) -> str:
		return f"{self.path}?{self.query}" if self.query else self.path

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			status=status,
			message=message,
			content=content,
			contentType=contentType,
			contentLength=contentLength,
			protocol=self.protocol,
			headers=headers,
			# A response to a HEAD request carries the headers of the
			# equivalent GET request, but no body.
			bodyless=self.method.upper() == "HEAD",
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.url} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response."""

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
		bodyless: bool = False,
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects. When `bodyless`
		is set, the headers describe the content but no body is attached."""
		body: THTTPBody | None = None
		if content is None:
			pass
		elif isinstance(content, str):
			body = HTTPBodyBlob.FromBytes(content.encode(DEFAULT_ENCODING))
		elif isinstance(content, bytes):
			body = HTTPBodyBlob.FromBytes(content)
		elif isinstance(content, HTTPBodyFile):
			body = content
		elif isinstance(content, Path):
			body = HTTPBodyFile(content.absolute(), 0, os.path.getsize(content))
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		if body is not None and contentLength is None:
			contentLength = body.length
		res_headers: dict[str, str] = (
			{headername(k): v for k, v in headers.items()} if headers else {}
		)
		if contentType is not None:
			res_headers["Content-Type"] = contentType
		if contentLength is not None:
			res_headers["Content-Length"] = str(contentLength)
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=HTTPHeaders.Make(res_headers),
			body=None if bodyless else body,
			protocol=protocol,
		)

	__slots__ = [
		"protocol",
		"status",
		"message",
		"headers",
		"body",
	]

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: THTTPBody | None = None,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: HTTPHeaders = headers
		self.body: THTTPBody | None = body

	def getHeader(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def hasHeader(self, name: str) -> bool:
		return headername(name) in self.headers.headers

	async def read(self, readSize: int = READ_SIZE) -> bytes:
		"""Reads the whole body in memory."""
		writer = BytesBodyWriter(readSize)
		await writer.write(self.body)
		return writer.value

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers} {self.body})"


# EOF
