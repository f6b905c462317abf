import re
from enum import Enum
from typing import NamedTuple, TypeAlias

__doc__ = """
Parsing of the `Range` request header and selection of the byte window
to send. Only single ranges are served as partial content: a request
for several ranges gets the whole content, which is always a valid
answer to a range request.

SEE: https://www.rfc-editor.org/rfc/rfc9110#section-14.2
"""

RE_RANGES = re.compile(r"^\s*bytes\s*=(.*)$", re.IGNORECASE)
# Positions are capped at 20 digits, which covers any real file size
RE_RANGE = re.compile(r"^\s*(\d{0,20})\s*-\s*(\d{0,20})\s*$")


class ByteRange(NamedTuple):
	"""An inclusive range of bytes, `0 <= start <= end < size`."""

	start: int
	end: int

	@property
	def length(self) -> int:
		return self.end - self.start + 1


class Satisfiable(NamedTuple):
	ranges: tuple[ByteRange, ...]
	size: int


class Unsatisfiable(NamedTuple):
	size: int


class NoRange(Enum):
	Whole = "whole"


# Serve the whole content, ignoring the `Range` header
NO_RANGE = NoRange.Whole

TRangeSelection: TypeAlias = Satisfiable | Unsatisfiable | NoRange


def parseRange(header: str, size: int) -> TRangeSelection:
	"""Parses the value of a `Range` header for content of the given
	`size`. Anything that is not a single well-formed byte range yields
	`NO_RANGE`."""
	match = RE_RANGES.match(header)
	if not match:
		return NO_RANGE
	specs = match.group(1).split(",")
	if len(specs) != 1:
		return NO_RANGE
	spec = RE_RANGE.match(specs[0])
	if not spec:
		return NO_RANGE
	first, last = spec.groups()
	if not first and not last:
		return NO_RANGE
	elif not first:
		# Suffix range, the last N bytes
		suffix = int(last)
		if suffix == 0 or size == 0:
			return Unsatisfiable(size)
		return Satisfiable((ByteRange(max(0, size - suffix), size - 1),), size)
	start = int(first)
	end = int(last) if last else size - 1
	if end < start:
		return NO_RANGE
	elif start >= size:
		return Unsatisfiable(size)
	else:
		return Satisfiable((ByteRange(start, min(end, size - 1)),), size)


def selectRange(header: str | None, size: int, enabled: bool = True) -> TRangeSelection:
	"""Selects what to send given the `Range` header, if any."""
	if not enabled or not header:
		return NO_RANGE
	return parseRange(header, size)


# EOF
