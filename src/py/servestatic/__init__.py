from typing import Any

from .dispatch import Fallthrough, StaticFiles  # NOQA: F401
from .errors import (  # NOQA: F401
	ConfigurationError,
	IOFault,
	StaticError,
	StaticRejection,
)
from .http.model import HTTPRequest, HTTPResponse  # NOQA: F401
from .options import Dotfiles, ServeConfig  # NOQA: F401


def serveStatic(root: str, **options: Any) -> StaticFiles:
	"""Creates a static mount serving the files in `root`."""
	return StaticFiles(root, **options)


# EOF
