import os
from pathlib import Path
from urllib.parse import unquote

import pytest

from harness import media
from mediaserve.errors import DirectoryUnreadable
from mediaserve.listing import (
	DirectoryEntryRecord,
	DirectoryListingBuilder,
	parentPath,
	sortKey,
)
from mediaserve.paths import PathResolver
from mediaserve.utils.files import FileCategory, category, contentType


def test_root_listing(tmp_path: Path):
	view = DirectoryListingBuilder("Test").build(media(tmp_path), "/")
	assert view.path == "/"
	assert view.parent is None
	assert view.name == "Test"
	assert [_.name for _ in view.entries] == ["sub", "a.txt", "Z.mp4"]
	assert [_.href for _ in view.entries] == ["/sub", "/a.txt", "/Z.mp4"]
	sub, txt, mp4 = view.entries
	assert sub.isDirectory and sub.contentType is None
	assert sub.category is FileCategory.Directory and sub.cssClass == "directory"
	assert txt.contentType == "text/plain"
	assert mp4.contentType == "video/mp4" and mp4.size == 1024
	assert mp4.icon == "🎬" and mp4.cssClass == "video-file"


def test_hidden(tmp_path: Path):
	(tmp_path / ".env").write_text("KEY=value")
	(tmp_path / ".git").mkdir()
	(tmp_path / "visible").write_text("")
	view = DirectoryListingBuilder().build(tmp_path, "/")
	assert [_.name for _ in view.entries] == ["visible"]


def test_ordering():
	def record(name: str, isDirectory: bool = False) -> DirectoryEntryRecord:
		return DirectoryEntryRecord(name, f"/{name}", 0, 0.0, isDirectory)

	records = [
		record("b.mp3"),
		record("Zeta", True),
		record("A.mp3"),
		record("alpha", True),
		record("a.mp3"),
	]
	expected = ["alpha", "Zeta", "A.mp3", "a.mp3", "b.mp3"]
	assert [_.name for _ in sorted(records, key=sortKey)] == expected
	assert [_.name for _ in sorted(reversed(records), key=sortKey)] == expected


def test_nested(tmp_path: Path):
	nested = tmp_path / "My Movies" / "été"
	nested.mkdir(parents=True)
	(nested / "film #1.mkv").write_bytes(b"mkv")
	view = DirectoryListingBuilder().build(nested, "/My Movies/été")
	assert view.parent == "/My Movies"
	(entry,) = view.entries
	assert entry.path == "/My Movies/été/film #1.mkv"
	assert entry.href == "/My%20Movies/%C3%A9t%C3%A9/film%20%231.mkv"
	assert entry.contentType == "video/x-matroska"


def test_link_roundtrip(tmp_path: Path):
	media(tmp_path)
	(tmp_path / "100% real.mp3").write_bytes(b"mp3")
	(tmp_path / "sub" / "what?.png").write_bytes(b"png")
	resolver = PathResolver(tmp_path)
	builder = DirectoryListingBuilder()
	for directory in ("/", "/sub"):
		resolved = resolver.resolve(directory)
		for entry in builder.build(resolved.path, resolved.relative).entries:
			assert unquote(entry.href) == entry.path
			target = resolver.resolve(entry.href)
			assert target.path == resolved.path / entry.name
			assert target.path.exists()


def test_parent():
	assert parentPath("/") is None
	assert parentPath("") is None
	assert parentPath("/sub") == "/"
	assert parentPath("/a/b") == "/a"
	assert parentPath("/a/b/") == "/a"


def test_unreadable_entry(tmp_path: Path):
	(tmp_path / "file.txt").write_text("text")
	os.symlink(tmp_path / "missing", tmp_path / "broken")
	view = DirectoryListingBuilder().build(tmp_path, "/")
	assert [_.name for _ in view.entries] == ["file.txt"]


def test_unreadable_directory(tmp_path: Path):
	(tmp_path / "file.txt").write_text("text")
	with pytest.raises(DirectoryUnreadable):
		DirectoryListingBuilder().build(tmp_path / "file.txt", "/file.txt")
	with pytest.raises(DirectoryUnreadable):
		DirectoryListingBuilder().build(tmp_path / "missing", "/missing")


def test_categories():
	assert category("song.FLAC") is FileCategory.Audio
	assert category("photo.jpeg") is FileCategory.Image
	assert category("clip.bin", "video/mpeg") is FileCategory.Video
	assert category("notes.txt", "text/plain") is FileCategory.File
	assert category("movies", None, True) is FileCategory.Directory
	assert contentType("unknown.zzzz") == "application/octet-stream"
	assert contentType("noextension") == "application/octet-stream"
	assert contentType(Path("/a/b/subtitles.vtt")) == "text/vtt"

def test_undecodable_name(tmp_path: Path):
	media(tmp_path)
	with open(os.path.join(os.fsencode(tmp_path), b"bad\xff.mp4"), "wb") as f:
		f.write(b"mp4")
	view = DirectoryListingBuilder().build(tmp_path, "/")
	assert [_.name for _ in view.entries] == ["sub", "a.txt", "Z.mp4"]


# EOF
