from mediaserve.listing import DirectoryEntryRecord, DirectoryListingView
from mediaserve.render import renderEntry, renderListing
from mediaserve.utils.htmpl import H, raw


def test_escaping():
	assert str(H.div("<b>&</b>", _="x")) == '<div class="x">&lt;b&gt;&amp;&lt;/b&gt;</div>'
	assert str(H.a("link", href='/a"b')) == '<a href="/a&quot;b">link</a>'
	assert str(H.style(raw("a > b {}"))) == "<style>a > b {}</style>"
	assert str(H.meta(charset="utf-8")) == '<meta charset="utf-8">'


def test_entry():
	entry = DirectoryEntryRecord(
		"<clip>.mp4",
		"/<clip>.mp4",
		1_572_864,
		0.0,
		False,
		"video/mp4",
		"/%3Cclip%3E.mp4",
	)
	html = str(renderEntry(entry))
	assert 'href="/%3Cclip%3E.mp4"' in html
	assert 'class="file-item video-file"' in html
	assert "&lt;clip&gt;.mp4" in html
	assert "video/mp4 • " in html
	assert "1.50 MB" in html
	directory = str(
		renderEntry(DirectoryEntryRecord("docs", "/docs", 4096, 0.0, True, None, "/docs"))
	)
	assert 'class="file-item directory"' in directory
	assert "file-info" not in directory


def test_listing():
	view = DirectoryListingView(
		path="/My Movies",
		parent="/",
		entries=[],
		name="Media & Co",
	)
	html = renderListing(view)
	assert html.startswith("<!DOCTYPE html>\n<html")
	assert "<title>Media &amp; Co - /My Movies</title>" in html
	assert 'class="file-item parent-link"' in html
	assert 'href="/"' in html


def test_listing_parent_escaped():
	view = DirectoryListingView(path="/a b/c", parent="/a b", entries=[])
	assert 'href="/a%20b"' in renderListing(view)


# EOF
