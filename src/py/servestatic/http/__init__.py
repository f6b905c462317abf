from .model import (
	HTTPRequest,
	HTTPResponse,
	HTTPHeaders,
	HTTPBodyBlob,
	HTTPBodyFile,
	HTTPBodyWriter,
	BytesBodyWriter,
	HTTPRequestError,
	headername,
)  # NOQA: F401
from .status import HTTP_STATUS  # NOQA: F401

# EOF
