from enum import Enum
from pathlib import Path

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class StaticError(Enum):
	"""The conditions a static request can end in, other than a send."""

	Malformed = "malformed"  # Bad URL encoding, null byte
	NameTooLong = "nametoolong"  # Path exceeds the platform limits
	Forbidden = "forbidden"  # Escapes root, denied dotfile, not readable
	NotFound = "notfound"  # No file, extension or index match
	PreconditionFailed = "preconditionfailed"
	RangeNotSatisfiable = "rangenotsatisfiable"
	MethodNotAllowed = "methodnotallowed"
	IOFault = "iofault"  # Unexpected filesystem error


ERROR_STATUS: dict[StaticError, int] = {
	StaticError.Malformed: 404,
	StaticError.NameTooLong: 404,
	StaticError.Forbidden: 403,
	StaticError.NotFound: 404,
	StaticError.PreconditionFailed: 412,
	StaticError.RangeNotSatisfiable: 416,
	StaticError.MethodNotAllowed: 405,
	StaticError.IOFault: 500,
}

ERROR_MESSAGE: dict[StaticError, str] = {
	StaticError.Malformed: "Not Found",
	StaticError.NameTooLong: "ENAMETOOLONG: name too long",
	StaticError.Forbidden: "Forbidden",
	StaticError.NotFound: "Not Found (ENOENT: no such file or directory)",
	StaticError.MethodNotAllowed: "Method Not Allowed",
}


class HTTPRequestError(Exception):
	"""Base for errors that map to an HTTP status."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType


class ConfigurationError(ValueError):
	"""Raised when a static mount is created with invalid options."""


class StaticRejection(HTTPRequestError):
	"""A non-fatal condition raised by the filesystem layer, which the
	dispatcher turns either into a fallthrough or an error response."""

	def __init__(self, error: StaticError, path: Path | str | None = None):
		super().__init__(ERROR_MESSAGE.get(error, error.name), ERROR_STATUS[error])
		self.error: StaticError = error
		self.path: Path | str | None = path


class IOFault(HTTPRequestError):
	"""An unexpected filesystem error. It is never converted into a
	fallthrough, and propagates to the caller."""

	def __init__(self, path: Path | str, cause: OSError):
		super().__init__(
			f"Filesystem error on {path}: [{cause.__class__.__name__}] {cause.strerror or cause}",
			ERROR_STATUS[StaticError.IOFault],
		)
		self.error: StaticError = StaticError.IOFault
		self.path: Path | str = path
		self.errno: int | None = cause.errno


# EOF
