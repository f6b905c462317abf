from typing import BinaryIO, Iterator

DEFAULT_ENCODING: str = "utf8"


def readWindow(
	file: BinaryIO, offset: int, size: int, chunk: int
) -> Iterator[bytes]:
	"""Yields at most `size` bytes from `file` starting at `offset`, by
	chunks of `chunk` bytes. Stops early if the file is shorter than
	expected (it may have been truncated since it was stat'ed)."""
	file.seek(offset)
	remaining: int = size
	while remaining > 0:
		data = file.read(min(chunk, remaining))
		if not data:
			break
		remaining -= len(data)
		yield data


# EOF
