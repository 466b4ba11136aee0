import io

import pytest

from mediaserve.utils import logging
from mediaserve.utils.logging import LogLevel, parseLevel


@pytest.fixture
def stream(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
	res = io.StringIO()
	monkeypatch.setattr(logging, "ERR", res)
	monkeypatch.setattr(logging, "LOG_LEVEL", LogLevel.Info)
	return res


def test_levels():
	assert parseLevel("debug") is LogLevel.Debug
	assert parseLevel(" WARNING ") is LogLevel.Warning
	assert parseLevel("nope") is LogLevel.Info
	assert parseLevel(None, LogLevel.Error) is LogLevel.Error


def test_filtering(stream: io.StringIO):
	logging.debug("Hidden")
	logging.info("Served", Path="/a.txt")
	logging.setLevel("error")
	logging.warning("Dropped")
	logging.error("Kept", 500)
	output = stream.getvalue()
	assert "Hidden" not in output
	assert "Served" in output and "Path" in output and "/a.txt" in output
	assert "Dropped" not in output
	assert "Kept" in output
	assert not logging.logged(logging.info)
	assert logging.logged(logging.error)


def test_event(stream: io.StringIO):
	logging.event("Request", 206, Method="GET", Path="/movie.mp4")
	output = stream.getvalue()
	assert "Request" in output
	assert "206" in output
	assert "/movie.mp4" in output


def test_exception(stream: io.StringIO):
	try:
		raise RuntimeError("Boom")
	except RuntimeError as e:
		assert logging.exception(e, "Failed") is e
	assert "[RuntimeError] Boom" in stream.getvalue()


# EOF
