from mediaserve.http.model import HTTPProcessingStatus, HTTPRequest
from mediaserve.http.parser import HTTPParser, parseQuery, parseRequestLine

REQUEST: bytes = (
	b"GET /movies/My%20Clip.mp4?format=json HTTP/1.1\r\n"
	b"Host: 127.0.0.1\r\n"
	b"range: bytes=0-99\r\n"
	b"\r\n"
)


def requests(parser: HTTPParser, *chunks: bytes) -> list[HTTPRequest]:
	return [
		atom for chunk in chunks for atom in parser.feed(chunk) if isinstance(atom, HTTPRequest)
	]


def test_request():
	(req,) = requests(HTTPParser(), REQUEST)
	assert req.method == "GET"
	assert req.path == "/movies/My%20Clip.mp4"
	assert req.param("format") == "json"
	assert req.header("Range") == "bytes=0-99"
	assert req.header("host") == "127.0.0.1"
	assert req.keepAlive


def test_chunked():
	parser = HTTPParser()
	chunks = [REQUEST[i : i + 7] for i in range(0, len(REQUEST), 7)]
	(req,) = requests(parser, *chunks)
	assert req.path == "/movies/My%20Clip.mp4"
	assert not parser.buffer


def test_pipelining():
	parser = HTTPParser()
	second = b"HEAD / HTTP/1.1\r\nConnection: close\r\n\r\n"
	atoms = list(parser.feed(REQUEST + second))
	assert [type(_) for _ in atoms] == [
		HTTPRequest,
		HTTPProcessingStatus,
		HTTPRequest,
		HTTPProcessingStatus,
	]
	assert atoms[2].method == "HEAD"
	assert not atoms[2].keepAlive


def test_body():
	parser = HTTPParser()
	(req,) = requests(
		parser,
		b"POST /upload HTTP/1.1\r\nContent-Length: 5\r\n\r\nhel",
		b"lo",
	)
	assert req.body.raw == b"hello"
	assert req.contentLength == 5
	assert not req.hasRemaining


def test_large_body():
	parser = HTTPParser(maxBody=4)
	(req,) = requests(parser, b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\n")
	assert req.hasRemaining
	assert parser.isClosed


def test_bad_format():
	for payload in (
		b"GARBAGE\r\n\r\n",
		b"GET / FTP/1.0\r\n\r\n",
		b"GET / HTTP/1.1\r\nNoColon\r\n\r\n",
		b"GET / HTTP/1.1\r\nContent-Length: x\r\n\r\n",
	):
		parser = HTTPParser()
		assert list(parser.feed(payload)) == [HTTPProcessingStatus.BadFormat], payload
		assert parser.isClosed


def test_request_line():
	line = parseRequestLine(b"get /a?b=c#frag HTTP/1.0")
	assert line is not None
	assert (line.method, line.path, line.query, line.protocol) == (
		"GET",
		"/a",
		"b=c",
		"HTTP/1.0",
	)
	assert parseRequestLine("GET /é HTTP/1.1".encode("utf8")) is None
	assert parseQuery("format=json&flag&q=a+b%21") == {
		"format": "json",
		"flag": "",
		"q": "a b!",
	}


def test_keep_alive():
	assert not HTTPRequest.Create("GET", "/", protocol="HTTP/1.0").keepAlive
	assert HTTPRequest.Create(
		"GET", "/", {"connection": "Keep-Alive"}, protocol="HTTP/1.0"
	).keepAlive
	assert not HTTPRequest.Create("GET", "/", {"Connection": "close"}).keepAlive


# EOF
