import mimetypes
from pathlib import Path

mimetypes.init()

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

# Overrides for names or extensions the platform database gets wrong or
# does not know about.
MIME_TYPES: dict[str, str] = {
	"importmap.json": "application/importmap+json",
	"bz2": "application/x-bzip",
	"gz": "application/x-gzip",
	"js": "application/javascript",
	"mjs": "application/javascript",
	"md": "text/markdown",
	"wasm": "application/wasm",
	"webmanifest": "application/manifest+json",
}

# Non `text/*` types that are still textual, and get a charset
TEXTUAL_TYPES: set[str] = {
	"application/javascript",
	"application/json",
	"application/importmap+json",
	"application/manifest+json",
	"application/xml",
	"image/svg+xml",
}


def charset(contentType: str) -> str | None:
	"""Returns the charset to advertise for the given content type, if any."""
	if contentType.startswith("text/") or contentType in TEXTUAL_TYPES:
		return "UTF-8"
	else:
		return None


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the given path, including the charset
	for textual types. Unknown extensions map to `application/octet-stream`."""
	name: str = Path(path).name
	res: str | None = MIME_TYPES.get(name)
	if res is None and "." in name:
		res = MIME_TYPES.get(name.rsplit(".", 1)[-1].lower())
	if res is None:
		res = mimetypes.guess_type(name, strict=False)[0] or DEFAULT_CONTENT_TYPE
	return f"{res}; charset={cs}" if (cs := charset(res)) else res


# EOF
