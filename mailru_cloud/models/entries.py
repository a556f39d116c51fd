"""
Cloud structure domain models.

These are immutable (frozen) dataclasses built fresh from every server
response. Operations that change an entry return a new instance.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from mailru_cloud.core.size import Size


class EntryKind(StrEnum):
    """Kind of cloud entry, as the listing endpoint names it."""

    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True, kw_only=True)
class CloudFile:
    """A file stored in the cloud."""

    name: str
    full_path: str
    size: Size = Size()
    public_link: str | None = None
    hash: str | None = None
    modified_at: datetime | None = None

    kind = EntryKind.FILE


@dataclass(frozen=True, kw_only=True)
class CloudFolder:
    """
    A folder stored in the cloud.

    ``children`` is the listing snapshot returned with the folder; it is empty
    for folders that were not listed themselves (e.g. nested entries).
    """

    name: str
    full_path: str
    size: Size = Size()
    public_link: str | None = None
    files_count: int = 0
    folders_count: int = 0
    children: tuple["CloudEntry", ...] = ()

    kind = EntryKind.FOLDER

    @property
    def files(self) -> tuple[CloudFile, ...]:
        return tuple(c for c in self.children if isinstance(c, CloudFile))

    @property
    def folders(self) -> tuple["CloudFolder", ...]:
        return tuple(c for c in self.children if isinstance(c, CloudFolder))

    def find(self, name: str, kind: EntryKind) -> "CloudEntry | None":
        """Find a direct child by exact name and kind."""
        candidates = self.files if kind == EntryKind.FILE else self.folders
        return next((c for c in candidates if c.name == name), None)

    def format_tree(self, indent: int = 0) -> str:
        """
        Format the snapshot as a tree string.

        Args:
            indent: Current indentation level.

        Returns:
            Multi-line string, folders first then files, alphabetically.
        """
        prefix = "  " * indent
        lines = [f"{prefix}[D] {self.name or '/'}"]
        ordered = sorted(self.children, key=lambda c: (c.kind == EntryKind.FILE, c.name.lower()))
        for child in ordered:
            if isinstance(child, CloudFolder):
                lines.append(child.format_tree(indent + 1))
            else:
                lines.append(f"{prefix}  [F] {child.name} ({child.size})")
        return "\n".join(lines)


CloudEntry = CloudFile | CloudFolder


@dataclass(frozen=True, kw_only=True)
class History:
    """
    A file history record.

    The first record returned by the server is the current version.
    """

    id: int
    name: str
    full_path: str
    size: Size
    revision: int
    hash: str | None
    modified_at: datetime | None
    is_current: bool = False
