"""Cloud path helpers.

Every path handed to the server goes through ``normalize_path`` first.
"""

import re
from pathlib import PurePosixPath

_SEPARATORS = re.compile(r"[\\/]+")


def normalize_path(
    path: str | None, leading_slash: bool = True, trailing_slash: bool = True
) -> str:
    """
    Canonicalize a cloud path.

    Runs of forward and back slashes collapse to a single "/", then the
    leading and trailing slash are added or stripped according to the flags.
    The function is idempotent for fixed flags.

    Args:
        path: Raw path, None is treated as the root.
        leading_slash: Whether the result starts with "/".
        trailing_slash: Whether the result ends with "/".

    Returns:
        The normalized path. The root is "/" whenever either slash is wanted.
    """
    body = _SEPARATORS.sub("/", path or "").strip("/")
    if not body:
        return "/" if (leading_slash or trailing_slash) else ""

    if leading_slash:
        body = "/" + body
    if trailing_slash:
        body = body + "/"
    return body


def parent_of(path: str) -> str:
    """
    Return the parent folder of a path, including its trailing slash.

    Returns "" for the root or for a bare name without any slash.
    """
    trimmed = path.rstrip("/")
    return trimmed[: trimmed.rfind("/") + 1]


def entry_name(path: str) -> str:
    """Last segment of a path, ignoring trailing slashes."""
    return path.rstrip("/").split("/")[-1]


def with_extension_of(name: str, original: str) -> str:
    """
    Append the extension of ``original`` to ``name`` unless it already has it.

    The comparison is case-insensitive: "Photo.JPG" keeps its suffix for an
    original "photo.jpg".
    """
    extension = PurePosixPath(original).suffix
    if name.lower().endswith(extension.lower()):
        return name
    return name + extension
