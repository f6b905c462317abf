from servestatic.ranges import (
	NO_RANGE,
	ByteRange,
	Satisfiable,
	Unsatisfiable,
	parseRange,
	selectRange,
)

SIZE: int = 9


def window(header: str, size: int = SIZE) -> tuple[int, int] | None:
	res = parseRange(header, size)
	assert isinstance(res, Satisfiable), f"Expected a satisfiable range for {header}"
	assert len(res.ranges) == 1
	return res.ranges[0].start, res.ranges[0].end


def test_ranges():
	assert window("bytes=0-4") == (0, 4)
	assert window("bytes=0-0") == (0, 0)
	assert window("bytes=2-5") == (2, 5)
	assert window("bytes=3-") == (3, 8)
	assert window("bytes=-3") == (6, 8)
	assert window("bytes=-20") == (0, 8)
	assert window("bytes=2-50") == (2, 8)
	assert window(" bytes = 1 - 2 ") == (1, 2)


def test_unsatisfiable():
	assert parseRange("bytes=9-50", SIZE) == Unsatisfiable(SIZE)
	assert parseRange("bytes=20-", SIZE) == Unsatisfiable(SIZE)
	assert parseRange("bytes=-0", SIZE) == Unsatisfiable(SIZE)
	assert parseRange("bytes=0-", 0) == Unsatisfiable(0)
	assert parseRange("bytes=-5", 0) == Unsatisfiable(0)
	assert parseRange("bytes=" + "9" * 20 + "-", SIZE) == Unsatisfiable(SIZE)


def test_invalid_ranges_serve_everything():
	for header in (
		"asdf",
		"bytes",
		"bytes=",
		"bytes=-",
		"bytes=a-b",
		"bytes=5-2",
		"items=0-4",
		# Several ranges
		"bytes=0-1,3-4",
		"bytes=0-1, 20-30",
		# Positions too long to be converted
		"bytes=" + "9" * 5000 + "-",
		"bytes=-" + "1" * 5000,
		"bytes=0-" + "9" * 5000,
	):
		assert parseRange(header, SIZE) is NO_RANGE, header


def test_select():
	assert selectRange(None, SIZE) is NO_RANGE
	assert selectRange("", SIZE) is NO_RANGE
	assert selectRange("bytes=0-4", SIZE, enabled=False) is NO_RANGE
	assert selectRange("bytes=0-4", SIZE) == Satisfiable((ByteRange(0, 4),), SIZE)


def test_byte_range():
	assert ByteRange(0, 0).length == 1
	assert ByteRange(2, 5).length == 4


# EOF
