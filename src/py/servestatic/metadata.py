import errno
import os
import stat as statmodule
from pathlib import Path
from typing import NamedTuple

from .errors import IOFault, StaticError, StaticRejection


class FileInfo(NamedTuple):
	"""The metadata of a filesystem entry needed to serve it."""

	path: Path
	size: int = 0
	mtime: float = 0.0
	exists: bool = False
	isDirectory: bool = False
	mode: int = 0

	@property
	def isFile(self) -> bool:
		return self.exists and statmodule.S_ISREG(self.mode)


# Errors meaning that there is nothing (usable) at the path
MISSING: set[int] = {errno.ENOENT, errno.ENOTDIR}
DENIED: set[int] = {errno.EACCES, errno.EPERM}


def stat(path: Path) -> FileInfo:
	"""Retrieves the metadata for the entry at `path`. Nothing is cached, as
	the filesystem may change between requests.

	Missing entries yield a `FileInfo` with `exists=False`, a name too long
	or a denied access raise a `StaticRejection` and any other error an
	`IOFault`."""
	try:
		st = os.stat(path)
	except OSError as e:
		if e.errno in MISSING:
			return FileInfo(path)
		elif e.errno == errno.ENAMETOOLONG:
			raise StaticRejection(StaticError.NameTooLong, path) from e
		elif e.errno in DENIED:
			raise StaticRejection(StaticError.Forbidden, path) from e
		else:
			raise IOFault(path, e) from e
	except ValueError as e:
		# Raised for embedded null bytes
		raise StaticRejection(StaticError.Malformed, path) from e
	return FileInfo(
		path,
		size=st.st_size,
		mtime=st.st_mtime,
		exists=True,
		isDirectory=statmodule.S_ISDIR(st.st_mode),
		mode=st.st_mode,
	)


# EOF
