import time
from urllib.parse import quote

from .listing import DirectoryEntryRecord, DirectoryListingView
from .utils.htmpl import H, Node, html, raw

LISTING_CSS: str = """
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    max-width: 1200px;
    margin: 0 auto;
    padding: 20px;
    background-color: #f5f5f5;
}
.header {
    background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
    color: white;
    padding: 20px;
    border-radius: 10px;
    margin-bottom: 20px;
}
.header h1 {
    margin: 0;
    font-size: 24px;
}
.path {
    margin: 10px 0 0 0;
    font-size: 14px;
    opacity: 0.9;
}
.file-list {
    background: white;
    border-radius: 10px;
    overflow: hidden;
    box-shadow: 0 2px 10px rgba(0,0,0,0.1);
}
.file-item {
    display: block;
    padding: 15px 20px;
    text-decoration: none;
    color: #333;
    border-bottom: 1px solid #eee;
}
.file-item:hover {
    background-color: #f8f9fa;
}
.file-item:last-child {
    border-bottom: none;
}
.file-icon {
    display: inline-block;
    width: 20px;
    margin-right: 10px;
    text-align: center;
}
.file-name {
    font-weight: 500;
    display: inline;
}
.file-info {
    font-size: 12px;
    color: #666;
    margin-top: 5px;
}
.parent-link {
    background-color: #e3f2fd;
    font-weight: bold;
}
.directory { color: #1976d2; }
.video-file { color: #d32f2f; }
.audio-file { color: #388e3c; }
.image-file { color: #f57c00; }
"""


def formatTime(timestamp: float) -> str:
	return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(timestamp))


def renderEntry(entry: DirectoryEntryRecord) -> Node:
	info: Node | None = (
		None
		if entry.isDirectory
		else H.div(
			f"{entry.contentType} • " if entry.contentType else "",
			f"{entry.formattedSize} MB • {formatTime(entry.modified)}",
			_="file-info",
		)
	)
	return H.a(
		H.span(entry.icon, _="file-icon"),
		H.div(entry.name, _="file-name"),
		info,
		href=entry.href,
		_=f"file-item {entry.cssClass}".strip(),
	)


def renderListing(view: DirectoryListingView) -> str:
	"""Renders the listing as an HTML page."""
	items: list[Node] = []
	if view.parent is not None:
		items.append(
			H.a(
				H.span("↰", _="file-icon"),
				H.div(".. (Parent Directory)", _="file-name"),
				href=quote(view.parent, safe="/"),
				_="file-item parent-link",
			)
		)
	items += [renderEntry(_) for _ in view.entries]
	return "".join(
		html(
			H.html(
				H.head(
					H.meta(charset="utf-8"),
					H.meta(
						name="viewport",
						content="width=device-width, initial-scale=1.0",
					),
					H.title(f"{view.name} - {view.path}"),
					H.style(raw(LISTING_CSS)),
				),
				H.body(
					H.div(
						H.h1(view.name),
						H.div(view.path, _="path"),
						_="header",
					),
					H.div(*items, _="file-list"),
				),
				lang="en",
			),
			doctype="html",
		)
	)


# EOF
