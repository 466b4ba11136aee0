import mimetypes
from enum import Enum
from pathlib import Path

mimetypes.init()

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

# Media types that are not consistently known by the platform's MIME
# database, they take precedence over `mimetypes`.
MIME_TYPES: dict[str, str] = dict(
	mp4="video/mp4",
	m4v="video/mp4",
	mkv="video/x-matroska",
	webm="video/webm",
	avi="video/x-msvideo",
	mov="video/quicktime",
	wmv="video/x-ms-wmv",
	flv="video/x-flv",
	mp3="audio/mpeg",
	m4a="audio/mp4",
	aac="audio/aac",
	flac="audio/flac",
	ogg="audio/ogg",
	wav="audio/wav",
	webp="image/webp",
	srt="application/x-subrip",
	vtt="text/vtt",
	bz2="application/x-bzip",
	gz="application/x-gzip",
)


def extension(name: str) -> str:
	"""Returns the lowercase extension of the given name, without the dot."""
	stem, dot, ext = name.rpartition(".")
	return ext.lower() if dot and stem else ""


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the given path's extension, defaulting
	to `application/octet-stream`."""
	name: str = path.name if isinstance(path, Path) else str(path)
	return (
		res
		if (res := MIME_TYPES.get(extension(name)))
		else mimetypes.guess_type(name, strict=False)[0] or DEFAULT_CONTENT_TYPE
	)


class FileCategory(Enum):
	"""The kind of an entry, used to pick its icon and style."""

	Directory = "directory"
	Video = "video"
	Audio = "audio"
	Image = "image"
	File = "file"


# Categories in order of precedence, with their extensions
CATEGORY_EXTENSIONS: tuple[tuple[FileCategory, frozenset[str]], ...] = (
	(
		FileCategory.Video,
		frozenset(("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm")),
	),
	(FileCategory.Audio, frozenset(("mp3", "wav", "flac", "aac", "ogg", "m4a"))),
	(FileCategory.Image, frozenset(("jpg", "jpeg", "png", "gif", "bmp", "webp"))),
)

CATEGORY_ICON: dict[FileCategory, str] = {
	FileCategory.Directory: "📁",
	FileCategory.Video: "🎬",
	FileCategory.Audio: "🎵",
	FileCategory.Image: "🖼️",
	FileCategory.File: "📄",
}

CATEGORY_CLASS: dict[FileCategory, str] = {
	FileCategory.Directory: "directory",
	FileCategory.Video: "video-file",
	FileCategory.Audio: "audio-file",
	FileCategory.Image: "image-file",
	FileCategory.File: "",
}


def category(
	name: str, contentType: str | None = None, isDirectory: bool = False
) -> FileCategory:
	"""Classifies an entry by its extension or, when known, by the prefix
	of its content type (`video/`, `audio/`, `image/`)."""
	if isDirectory:
		return FileCategory.Directory
	ext: str = extension(name)
	for cat, extensions in CATEGORY_EXTENSIONS:
		if ext in extensions or (
			contentType and contentType.startswith(f"{cat.value}/")
		):
			return cat
	return FileCategory.File


# EOF
