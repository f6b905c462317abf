import asyncio
import errno
import io
import json
import os
from pathlib import Path
from typing import Any

import pytest

from servestatic import metadata
from servestatic.bridge.asgi import StaticASGI, asgi, requestPaths
from servestatic.errors import IOFault
from servestatic.utils import logging

TMessage = dict[str, Any]


def scope(
	path: str,
	*,
	method: str = "GET",
	headers: dict[str, str] | None = None,
	rootPath: str = "",
	query: bytes = b"",
	rawPath: bytes | None = None,
) -> TMessage:
	return {
		"type": "http",
		"asgi": {"version": "3.0"},
		"http_version": "1.1",
		"method": method,
		"scheme": "http",
		"path": path,
		"raw_path": rawPath,
		"root_path": rootPath,
		"query_string": query,
		"headers": [
			(k.lower().encode("latin-1"), v.encode("latin-1"))
			for k, v in (headers or {}).items()
		],
	}


async def call(app: Any, scope: TMessage) -> list[TMessage]:
	"""Runs the application, with a client that sends an empty request
	and then waits."""
	sent: list[TMessage] = []
	requested: bool = False

	async def receive() -> TMessage:
		nonlocal requested
		if not requested:
			requested = True
			return {"type": "http.request", "body": b"", "more_body": False}
		await asyncio.Event().wait()
		return {"type": "http.disconnect"}

	async def send(message: TMessage) -> None:
		sent.append(message)

	await asyncio.wait_for(app(scope, receive, send), 5)
	return sent


def fetch(app: Any, scope: TMessage) -> tuple[int, dict[str, str], bytes]:
	sent = asyncio.run(call(app, scope))
	assert sent[0]["type"] == "http.response.start"
	assert sent[-1]["type"] == "http.response.body"
	assert not sent[-1].get("more_body")
	headers = {k.decode("latin-1"): v.decode("latin-1") for k, v in sent[0]["headers"]}
	return sent[0]["status"], headers, b"".join(_.get("body", b"") for _ in sent[1:])


def test_request_paths():
	assert requestPaths({"path": "/a/b", "root_path": ""}) == ("/a/b", "/a/b")
	assert requestPaths({"path": "/static/a", "root_path": "/static"}) == (
		"/static/a",
		"/a",
	)
	# Servers that strip the root path from the path
	assert requestPaths({"path": "/a", "root_path": "/static"}) == ("/static/a", "/a")
	assert requestPaths({"path": "/a b", "raw_path": b"/a%20b"}) == ("/a%20b", "/a%20b")


def test_serve(root: Path):
	status, headers, body = fetch(asgi(root), scope("/todo.txt"))
	assert status == 200
	assert body == b"- groceries"
	assert headers["content-type"] == "text/plain; charset=UTF-8"
	assert headers["content-length"] == "11"
	assert headers["etag"].startswith('W/"')


def test_serve_raw_path(root: Path):
	status, _, body = fetch(asgi(root), scope("/foo bar", rawPath=b"/foo%20bar"))
	assert status == 200
	assert body == b"baz"


def test_head(root: Path):
	status, headers, body = fetch(asgi(root), scope("/todo.txt", method="HEAD"))
	assert status == 200
	assert headers["content-length"] == "11"
	assert body == b""


def test_range(root: Path):
	status, headers, body = fetch(
		asgi(root), scope("/nums", headers={"Range": "bytes=2-5"})
	)
	assert status == 206
	assert headers["content-range"] == "bytes 2-5/9"
	assert body == b"3456"


def test_large_file_is_streamed(root: Path):
	data = os.urandom(200_000)
	(root / "large.bin").write_bytes(data)
	sent = asyncio.run(call(asgi(root), scope("/large.bin")))
	chunks = [_ for _ in sent[1:] if _["body"]]
	assert len(chunks) > 1
	assert b"".join(_["body"] for _ in chunks) == data
	assert all(_["more_body"] for _ in chunks)
	assert sent[-1] == {"type": "http.response.body", "body": b"", "more_body": False}


def test_not_found(root: Path):
	status, headers, body = fetch(asgi(root), scope("/missing"))
	assert status == 404
	assert headers["content-type"] == "application/json"
	assert json.loads(body) == {
		"code": "ResourceNotFound",
		"message": "/missing does not exist",
	}


def test_fallthrough_to_app(root: Path):
	received: list[str] = []

	async def app(scope: TMessage, receive: Any, send: Any) -> None:
		received.append(scope["path"])
		await send({"type": "http.response.start", "status": 201, "headers": []})
		await send({"type": "http.response.body", "body": b"from app"})

	static = asgi(root, app)
	status, _, body = fetch(static, scope("/api/items", method="POST"))
	assert (status, body) == (201, b"from app")
	status, _, body = fetch(static, scope("/todo.txt"))
	assert (status, body) == (200, b"- groceries")
	assert received == ["/api/items"]


def test_mounted(root: Path):
	static = asgi(root)
	status, headers, _ = fetch(static, scope("/static/users", rootPath="/static"))
	assert status == 301
	assert headers["location"] == "/static/users/"
	status, _, body = fetch(static, scope("/static/users/", rootPath="/static"))
	assert (status, body) == (200, b"<p>tobi, loki, jane</p>")
	status, headers, _ = fetch(static, scope("/users", rootPath="/static"))
	assert headers["location"] == "/static/users/"


def test_redirect_keeps_query(root: Path):
	status, headers, body = fetch(asgi(root), scope("/users", query=b"name=john"))
	assert status == 301
	assert headers["location"] == "/users/?name=john"
	assert b"Redirecting to" in body


def test_disconnect_cancels_the_write(root: Path):
	data = os.urandom(500_000)
	(root / "large.bin").write_bytes(data)
	sent: list[TMessage] = []

	async def main() -> None:
		started = asyncio.Event()

		async def receive() -> TMessage:
			await started.wait()
			return {"type": "http.disconnect"}

		async def send(message: TMessage) -> None:
			sent.append(message)
			if message["type"] == "http.response.body":
				started.set()
				# A client that never reads
				await asyncio.sleep(60)

		await asyncio.wait_for(asgi(root)(scope("/large.bin"), receive, send), 5)

	asyncio.run(main())
	assert sent[0]["status"] == 200
	assert len(sent) == 2
	assert sent[-1]["more_body"]


def test_io_fault(root: Path, monkeypatch: pytest.MonkeyPatch):
	def failing(path: Path) -> os.stat_result:
		raise OSError(errno.EIO, "Input/output error", str(path))

	sink = io.StringIO()
	monkeypatch.setattr(logging, "SINK", sink)
	static = asgi(root)
	monkeypatch.setattr(metadata.os, "stat", failing)
	with pytest.raises(IOFault):
		asyncio.run(call(static, scope("/todo.txt")))
	# Logged once, where the fault is raised
	assert sink.getvalue().count("Filesystem error") == 1
	monkeypatch.undo()


def test_lifespan(root: Path):
	sent: list[TMessage] = []
	messages = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]

	async def receive() -> TMessage:
		return messages.pop(0)

	async def send(message: TMessage) -> None:
		sent.append(message)

	asyncio.run(asgi(root)({"type": "lifespan"}, receive, send))
	assert [_["type"] for _ in sent] == [
		"lifespan.startup.complete",
		"lifespan.shutdown.complete",
	]


def test_other_scopes_go_to_app(root: Path):
	scopes: list[str] = []

	async def app(scope: TMessage, receive: Any, send: Any) -> None:
		scopes.append(scope["type"])

	static = StaticASGI(asgi(root).static, app)
	asyncio.run(static({"type": "websocket"}, None, None))  # type: ignore[arg-type]
	assert scopes == ["websocket"]


# EOF
