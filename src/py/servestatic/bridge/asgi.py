import asyncio
import json
import os
from typing import Any, Awaitable, Callable, Literal, TypeAlias

from ..config import LOG_REQUESTS, READ_SIZE
from ..dispatch import Fallthrough, StaticFiles
from ..http.model import HTTPBodyWriter, HTTPRequest, HTTPResponse
from ..utils.logging import event, warning

# --
# ## ASGI Bridge
#
# Exposes a static mount through the ASGI gateway, so that any ASGI server
# can host it. Requests that the mount does not handle are passed on to an
# inner application, when given.

# SEE: https://asgi.readthedocs.io/en/latest/specs/main.html

TScope: TypeAlias = dict[str, Any]
TMessage: TypeAlias = dict[str, Any]
TReceive: TypeAlias = Callable[[], Awaitable[TMessage]]
TSend: TypeAlias = Callable[[TMessage], Awaitable[None]]
TASGIApplication: TypeAlias = Callable[[TScope, TReceive, TSend], Awaitable[None]]


class ASGIBodyWriter(HTTPBodyWriter):
	"""Writes response bodies as `http.response.body` messages."""

	__slots__ = ["send"]

	def __init__(self, send: TSend, readSize: int = READ_SIZE) -> None:
		super().__init__(readSize)
		self.send: TSend = send

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		await self.send(
			{"type": "http.response.body", "body": chunk or b"", "more_body": more}
		)
		return True


def requestPaths(scope: TScope) -> tuple[str, str]:
	"""Returns the full request path and the path relative to the mount
	point given by `root_path`. The raw path is preferred, as the engine
	does its own decoding."""
	root: str = scope.get("root_path") or ""
	raw: bytes | None = scope.get("raw_path")
	path: str = raw.decode("latin-1").partition("?")[0] if raw else scope["path"]
	if not root:
		return path, path
	elif path.startswith(root):
		return path, path[len(root) :]
	else:
		return f"{root}{path}", path


def requestHeaders(scope: TScope) -> dict[str, str]:
	res: dict[str, str] = {}
	for name, value in scope.get("headers") or ():
		k = name.decode("latin-1")
		v = value.decode("latin-1")
		res[k] = f"{res[k]}, {v}" if k in res else v
	return res


def notFound(request: HTTPRequest) -> HTTPResponse:
	return request.respond(
		json.dumps(
			{
				"code": "ResourceNotFound",
				"message": f"{request.path} does not exist",
			},
			separators=(",", ":"),
		),
		contentType="application/json",
		status=404,
	)


class StaticASGI:
	"""An ASGI application serving the files of a `StaticFiles` mount,
	falling back to the `app` (or to a JSON 404) for anything else."""

	def __init__(self, static: StaticFiles, app: TASGIApplication | None = None):
		self.static: StaticFiles = static
		self.app: TASGIApplication | None = app

	async def __call__(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		protocol = scope["type"]
		if protocol == "http":
			await self.onHTTP(scope, receive, send)
		elif self.app:
			await self.app(scope, receive, send)
		elif protocol == "lifespan":
			await self.onLifespan(receive, send)
		else:
			warning("Unsupported ASGI protocol", Protocol=protocol)

	async def onHTTP(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		path, local = requestPaths(scope)
		query: bytes = scope.get("query_string") or b""
		request = HTTPRequest(
			scope["method"],
			path,
			query.decode("latin-1") or None,
			requestHeaders(scope),
			protocol=f"HTTP/{scope.get('http_version', '1.1')}",
		)
		# An `IOFault` is logged where it is raised, and propagates to the server
		res = await self.static.process(request, local)
		if isinstance(res, Fallthrough):
			if self.app:
				await self.app(scope, receive, send)
				return
			res = notFound(request)
		LOG_REQUESTS and event(
			"Request", request.method, Path=request.url, Status=res.status
		)
		await self.write(res, receive, send)

	async def write(self, response: HTTPResponse, receive: TReceive, send: TSend) -> None:
		await send(
			{
				"type": "http.response.start",
				"status": response.status,
				"headers": [
					(k.lower().encode("latin-1"), v.encode("latin-1"))
					for k, v in response.headers.headers.items()
				],
			}
		)
		if response.body is None:
			await send({"type": "http.response.body", "body": b"", "more_body": False})
			return
		# The body is streamed while we watch for the client disconnecting,
		# in which case the write is cancelled and the file closed.
		writer = ASGIBodyWriter(send)
		writing = asyncio.create_task(writer.write(response.body))
		reading = asyncio.create_task(self.waitDisconnect(receive))
		done, pending = await asyncio.wait(
			{writing, reading}, return_when=asyncio.FIRST_COMPLETED
		)
		for task in pending:
			task.cancel()
		await asyncio.gather(*pending, return_exceptions=True)
		if writing in done:
			writing.result()

	async def waitDisconnect(self, receive: TReceive) -> TMessage:
		while True:
			message = await receive()
			if message["type"] == "http.disconnect":
				return message

	async def onLifespan(self, receive: TReceive, send: TSend) -> None:
		# SEE: https://asgi.readthedocs.io/en/latest/specs/lifespan.html
		while True:
			message = await receive()
			if message["type"] == "lifespan.startup":
				await send({"type": "lifespan.startup.complete"})
			elif message["type"] == "lifespan.shutdown":
				await send({"type": "lifespan.shutdown.complete"})
				return


def asgi(
	root: str | os.PathLike[str],
	app: TASGIApplication | None = None,
	**options: Any,
) -> StaticASGI:
	"""Creates an ASGI application serving the files in `root`, see
	`ServeConfig.Make` for the options."""
	return StaticASGI(StaticFiles(root, **options), app)


# EOF
