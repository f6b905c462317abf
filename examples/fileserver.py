"""
Static File Server Example

This demonstrates serving a directory through the ASGI bridge, with an
inner application receiving the requests that don't match a file.
Features shown:
- Extension fallback, so that `/about` serves `about.html`
- Long lived caching headers for immutable assets
- A `setHeaders` hook adding a header to every file sent
- Extra logging for nicer output

Usage:
    uvicorn fileserver:app

Test with:
    http://localhost:8000/           # Serves index.html, if any
    http://localhost:8000/README.md  # Serve specific file
    http://localhost:8000/api/time   # Handled by the inner application

The server will serve files from the current working directory.
"""

import json
import time
from typing import Any

from servestatic.bridge.asgi import asgi
from servestatic.metadata import FileInfo
from servestatic.utils.logging import info


async def api(scope: dict[str, Any], receive: Any, send: Any) -> None:
	"""The inner application, which gets whatever the files don't cover."""
	if scope["type"] != "http":
		return
	found: bool = scope["path"] == "/api/time"
	body = json.dumps({"time": time.time()} if found else {"error": "Not Found"})
	await send(
		{
			"type": "http.response.start",
			"status": 200 if found else 404,
			"headers": [(b"content-type", b"application/json")],
		}
	)
	await send({"type": "http.response.body", "body": body.encode("utf8")})


def served(headers: dict[str, str], file: FileInfo) -> None:
	headers["X-Served-From"] = file.path.name


app = asgi(
	".",
	api,
	extensions=["html"],
	maxAge="1h",
	setHeaders=served,
)

info("Serving files from current working directory")

if __name__ == "__main__":
	import uvicorn

	uvicorn.run(app)

# EOF
