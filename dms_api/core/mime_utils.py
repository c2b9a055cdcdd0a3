import mimetypes
import re
from pathlib import PurePosixPath


OCTET_STREAM = "application/octet-stream"

_MIME_PATTERN = re.compile(r"^[a-z0-9!#$&^_.+-]+/[a-z0-9!#$&^_.+-]+$")


def normalize_mime(raw_mime: str | None) -> str:
    if not raw_mime:
        return OCTET_STREAM

    base = raw_mime.split(";", 1)[0].strip().lower()
    if not base or not _MIME_PATTERN.match(base):
        return OCTET_STREAM
    return base


def resolve_upload_mime(declared_mime: str | None, filename: str) -> str:
    """Declared type when usable, otherwise a guess from the file name."""
    normalized = normalize_mime(declared_mime)
    if normalized != OCTET_STREAM:
        return normalized

    guessed, _encoding = mimetypes.guess_type(filename)
    return normalize_mime(guessed)


def file_extension(filename: str | None) -> str | None:
    if not filename:
        return None
    suffix = PurePosixPath(filename).suffix
    return suffix[1:].lower() or None
