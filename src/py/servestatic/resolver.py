import os
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from .errors import StaticError, StaticRejection
from .metadata import FileInfo, stat
from .options import Dotfiles, ServeConfig
from .utils.uri import decodePath

# The platform ceilings past which the filesystem answers ENAMETOOLONG
MAX_PATH_LENGTH: int = 4096
MAX_NAME_LENGTH: int = 255

# Separators other than `/` that the platform would interpret in a segment
SEPARATORS: tuple[str, ...] = tuple(
	_ for _ in (os.sep, os.altsep) if _ and _ != "/"
)


class TargetType(Enum):
	File = "file"
	Directory = "directory"
	NotFound = "notfound"
	Malformed = "malformed"
	Forbidden = "forbidden"


class ResolvedTarget(NamedTuple):
	"""The outcome of resolving a request path against the root. Only `File`
	targets carry an `info`, the others carry the `error` they stand for."""

	type: TargetType
	path: Path | None = None
	info: FileInfo | None = None
	error: StaticError | None = None
	trailingSlash: bool = False

	@staticmethod
	def Fail(
		error: StaticError, path: Path | None = None, trailingSlash: bool = False
	) -> "ResolvedTarget":
		return ResolvedTarget(
			TARGET_TYPE.get(error, TargetType.NotFound),
			path,
			error=error,
			trailingSlash=trailingSlash,
		)


TARGET_TYPE: dict[StaticError, TargetType] = {
	StaticError.Malformed: TargetType.Malformed,
	StaticError.NameTooLong: TargetType.Malformed,
	StaticError.Forbidden: TargetType.Forbidden,
	StaticError.NotFound: TargetType.NotFound,
}


def normalize(path: str) -> list[str] | None:
	"""Normalizes the `.` and `..` segments of the given decoded path
	logically, without touching the filesystem. Returns `None` when the
	path climbs above its start, even if it would come back down."""
	res: list[str] = []
	for segment in path.split("/"):
		if not segment or segment == ".":
			continue
		elif segment == "..":
			if not res:
				return None
			res.pop()
		else:
			res.append(segment)
	return res


def isContained(path: Path, root: Path) -> bool:
	"""Tells if `path` is `root` or lies below it."""
	p: str = os.path.normpath(path)
	r: str = os.path.normpath(root)
	return p == r or p.startswith(r.rstrip(os.sep) + os.sep)


def resolve(path: str, config: ServeConfig) -> ResolvedTarget:
	"""Maps the request `path` (percent-encoded or not) to a target within
	`config.root`. Extensions and index names are tried in the configured
	order, the first match wins."""
	decoded: str | None = decodePath(path)
	if decoded is None or "\x00" in decoded:
		return ResolvedTarget.Fail(StaticError.Malformed)
	trailing: bool = decoded.endswith("/")
	if len(decoded) > MAX_PATH_LENGTH:
		return ResolvedTarget.Fail(StaticError.NameTooLong, trailingSlash=trailing)
	parts = normalize(decoded)
	if parts is None or any(s in _ for _ in parts for s in SEPARATORS):
		return ResolvedTarget.Fail(StaticError.Forbidden, trailingSlash=trailing)
	if any(len(_.encode("utf8")) > MAX_NAME_LENGTH for _ in parts):
		return ResolvedTarget.Fail(StaticError.NameTooLong, trailingSlash=trailing)
	target: Path = config.root.joinpath(*parts)
	if not isContained(target, config.root):
		return ResolvedTarget.Fail(StaticError.Forbidden, target, trailing)
	if any(_.startswith(".") for _ in parts):
		if config.dotfiles is Dotfiles.Deny:
			return ResolvedTarget.Fail(StaticError.Forbidden, target, trailing)
		elif config.dotfiles is Dotfiles.Ignore:
			return ResolvedTarget.Fail(StaticError.NotFound, target, trailing)
	try:
		return resolveTarget(target, parts, trailing, config)
	except StaticRejection as e:
		return ResolvedTarget.Fail(e.error, target, trailing)


def resolveTarget(
	target: Path, parts: list[str], trailing: bool, config: ServeConfig
) -> ResolvedTarget:
	info: FileInfo = stat(target)
	if info.isDirectory:
		# A directory requested without a trailing slash is left to the
		# dispatcher, which redirects to the slashed path: the index is
		# then served from there, so that its relative links work.
		if trailing:
			for name in config.index:
				candidate = stat(target / name)
				if candidate.isFile:
					return ResolvedTarget(
						TargetType.File, candidate.path, candidate, trailingSlash=True
					)
		return ResolvedTarget(TargetType.Directory, target, trailingSlash=trailing)
	elif info.isFile:
		if trailing:
			# Like the filesystem would, with ENOTDIR
			return ResolvedTarget.Fail(StaticError.NotFound, target, trailing)
		return ResolvedTarget(TargetType.File, target, info)
	elif not info.exists and parts and not trailing:
		for ext in config.extensions:
			candidate = stat(target.with_name(f"{target.name}.{ext}"))
			if candidate.isFile:
				return ResolvedTarget(TargetType.File, candidate.path, candidate)
	return ResolvedTarget.Fail(StaticError.NotFound, target, trailing)


# EOF
