import pytest

from mediaserve.http.ranges import (
	ByteRange,
	UnsatisfiableRange,
	httpdate,
	ifRangeMatches,
	isNotModified,
	parsedate,
)


def test_parse():
	assert ByteRange.Parse("bytes=0-99", 1000) == ByteRange(0, 99)
	assert ByteRange.Parse("bytes=500-", 1000) == ByteRange(500, 999)
	assert ByteRange.Parse("bytes=-100", 1000) == ByteRange(900, 999)
	# The end is clamped, as is a suffix larger than the file
	assert ByteRange.Parse("bytes=900-5000", 1000) == ByteRange(900, 999)
	assert ByteRange.Parse("bytes=-5000", 1000) == ByteRange(0, 999)
	assert ByteRange.Parse("Bytes= 10 - 19", 1000) == ByteRange(10, 19)
	assert ByteRange(0, 99).length == 100
	assert ByteRange(0, 99).contentRange(1000) == "bytes 0-99/1000"


def test_ignored():
	for header in (
		None,
		"",
		"items=0-10",
		"bytes=",
		"bytes=-",
		"bytes=a-b",
		"bytes=0-10,20-30",
		"bytes 0-10",
	):
		assert ByteRange.Parse(header, 1000) is None, header


def test_unsatisfiable():
	for header, size in (
		("bytes=1000-", 1000),
		("bytes=2000-3000", 1000),
		("bytes=-0", 1000),
		("bytes=20-10", 1000),
		("bytes=0-", 0),
		("bytes=-10", 0),
	):
		with pytest.raises(UnsatisfiableRange):
			ByteRange.Parse(header, size)


def test_dates():
	assert httpdate(784111777) == "Sun, 06 Nov 1994 08:49:37 GMT"
	assert parsedate("Sun, 06 Nov 1994 08:49:37 GMT") == 784111777
	assert parsedate("not a date") is None
	assert parsedate(None) is None
	assert isNotModified("Sun, 06 Nov 1994 08:49:37 GMT", 784111777.5)
	assert isNotModified("Sun, 06 Nov 1994 08:49:38 GMT", 784111777)
	assert not isNotModified("Sun, 06 Nov 1994 08:49:36 GMT", 784111777)
	assert not isNotModified("garbage", 784111777)
	assert not isNotModified(None, 784111777)


def test_if_range():
	date = "Sun, 06 Nov 1994 08:49:37 GMT"
	assert ifRangeMatches(None, date)
	assert ifRangeMatches(date, date)
	assert not ifRangeMatches("Mon, 07 Nov 1994 08:49:37 GMT", date)
	assert not ifRangeMatches('"some-etag"', date)


# EOF
