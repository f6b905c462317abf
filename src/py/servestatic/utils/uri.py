import re
from urllib.parse import quote, unquote

# A `%` that does not start a valid escape sequence
RE_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
RE_LEADING_SLASHES = re.compile(r"^/+")

# Characters left as-is when encoding a URL: the reserved and unreserved
# sets of RFC 3986, plus `%` so that existing escapes are preserved.
URL_SAFE: str = "!#$&'()*+,/:;=?@[]~%"


def decodePath(path: str) -> str | None:
	"""Percent-decodes the given path, returning `None` when the path
	contains a malformed escape sequence or escapes bytes that are not
	valid UTF-8."""
	if RE_BAD_ESCAPE.search(path):
		return None
	try:
		return unquote(path, encoding="utf8", errors="strict")
	except UnicodeDecodeError:
		return None


def encodeURL(url: str) -> str:
	"""Encodes the characters that can't appear in a URL, leaving reserved
	characters and existing percent-escapes untouched. Lone `%` signs are
	encoded as `%25`."""
	return quote(RE_BAD_ESCAPE.sub("%25", url), safe=URL_SAFE)


def collapseLeadingSlashes(path: str) -> str:
	"""Ensures the path starts with exactly one slash, so that it can't be
	mistaken for a protocol-relative URL like `//host/path`."""
	return RE_LEADING_SLASHES.sub("/", path) if path.startswith("/") else path


# EOF
