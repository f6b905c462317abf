import argparse
import sys
from typing import Any

from . import config
from .bridge.asgi import asgi
from .errors import ConfigurationError
from .utils.logging import info

__doc__ = """
Serves a directory over HTTP through the ASGI bridge, using `uvicorn`
(install the `serve` extra).
"""


def parser() -> argparse.ArgumentParser:
	res = argparse.ArgumentParser(
		prog="servestatic",
		description="Serves the static files of a directory",
	)
	res.add_argument("root", nargs="?", default=".", help="Directory to serve")
	res.add_argument("--host", default=config.HOST, help="Address to bind to")
	res.add_argument("-p", "--port", type=int, default=config.PORT)
	res.add_argument(
		"--max-age",
		default="0",
		help="Cache lifetime, in milliseconds or as a duration like '1h' or '30d'",
	)
	res.add_argument(
		"--index", nargs="*", default=["index.html"], help="Directory index files"
	)
	res.add_argument(
		"--extensions", nargs="*", default=[], help="Extensions to try, like 'html'"
	)
	res.add_argument(
		"--dotfiles", choices=("allow", "deny", "ignore"), default="ignore"
	)
	res.add_argument("--no-redirect", action="store_true")
	res.add_argument("--no-fallthrough", action="store_true")
	res.add_argument("--immutable", action="store_true")
	return res


def options(args: argparse.Namespace) -> dict[str, Any]:
	max_age: str = args.max_age
	return dict(
		maxAge=int(max_age) if max_age.isdigit() else max_age,
		index=args.index or False,
		extensions=args.extensions or False,
		dotfiles=args.dotfiles,
		redirect=not args.no_redirect,
		fallthrough=not args.no_fallthrough,
		immutable=args.immutable,
	)


def main(argv: list[str] | None = None) -> int:
	args = parser().parse_args(argv)
	try:
		app = asgi(args.root, **options(args))
	except ConfigurationError as e:
		print(f"servestatic: {e}", file=sys.stderr)
		return 1
	# NOTE: Only needed to run the server
	import uvicorn

	info(
		"Serving static files",
		Root=str(app.static.config.root),
		Host=args.host,
		Port=args.port,
	)
	uvicorn.run(app, host=args.host, port=args.port, log_level=config.LOG_LEVEL)
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF
