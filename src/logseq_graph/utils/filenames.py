"""Mapping between page titles and file names.

Logseq's default ``triple-lowbar`` convention writes namespaces
(``a/b``) as ``a___b`` and percent-encodes characters that are not allowed
in file names on some platforms.
"""

import re
import unicodedata
from urllib.parse import quote, unquote

TRIPLE_LOWBAR = "triple-lowbar"

URL_ENCODED_PATTERN = re.compile(r"%[0-9a-fA-F]{2}")
RESERVED_CHARS_PATTERN = re.compile(r'[:\\*?"<>|#]+')
WINDOWS_RESERVED_FILE_BODIES = {
    "CON", "PRN", "AUX", "NUL",
    "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
    "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9",
}


class UnknownFilenameFormatError(ValueError):
    def __init__(self, format: str):
        super().__init__(f"unknown file name format: {format}")
        self.format = format


def _check_format(format: str) -> None:
    if format not in (TRIPLE_LOWBAR, ""):
        raise UnknownFilenameFormatError(format)


def _remove_boundary_slashes(value: str) -> str:
    if value.startswith("/"):
        value = value[1:]
    if value.endswith("/"):
        value = value[:-1]
    return value


def _escape_namespace_slashes_and_multilowbars(value: str) -> str:
    value = value.replace("___", "%5F%5F%5F")
    value = value.replace("_/", "%5F/")
    value = value.replace("/_", "/%5F")
    return value.replace("/", "___")


def _unescape_namespace_slashes_and_multilowbars(value: str) -> str:
    value = value.replace("___", "/")
    value = value.replace("%5F%5F%5F", "___")
    value = value.replace("%5F/", "_/")
    return value.replace("/%5F", "/_")


def title_to_filename(title: str, format: str = TRIPLE_LOWBAR) -> str:
    """Return the file name, without extension, for a page title.

    Examples:
        >>> title_to_filename("Hello/World")
        'Hello___World'
        >>> title_to_filename("CON")
        'CON___'

    Raises:
        UnknownFilenameFormatError: If ``format`` is not supported
    """
    _check_format(format)

    name = unicodedata.normalize("NFC", _remove_boundary_slashes(title))
    name = URL_ENCODED_PATTERN.sub(lambda m: m.group(0).replace("%", "%25"), name)
    name = RESERVED_CHARS_PATTERN.sub(lambda m: quote(m.group(0), safe=""), name)
    if name in WINDOWS_RESERVED_FILE_BODIES or name.endswith("."):
        name += "/"
    return _escape_namespace_slashes_and_multilowbars(name)


def filename_to_title(filename: str, format: str = TRIPLE_LOWBAR) -> str:
    """Return the page title for a file name without extension.

    Raises:
        UnknownFilenameFormatError: If ``format`` is not supported
    """
    _check_format(format)

    title = _unescape_namespace_slashes_and_multilowbars(filename)
    if title.endswith("/"):
        title = title[:-1]
    title = URL_ENCODED_PATTERN.sub(lambda m: unquote(m.group(0)), title)
    return unicodedata.normalize("NFC", title)
