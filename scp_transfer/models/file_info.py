"""Remote file metadata assembled from header lines."""

from dataclasses import dataclass


@dataclass
class FileInfo:
    """Metadata of a downloaded file.

    Built from a mandatory Create line and an optional Time line.
    """

    permissions: int = 0
    size: int = 0
    filename: str = ""
    atime: int | None = None
    mtime: int | None = None

    def update(self, other: "FileInfo | None") -> None:
        """Merge fields from another parse result.

        A field is overwritten only when the incoming value is set
        (non-zero, non-empty).

        Args:
            other: Partial metadata from a later header line
        """
        if other is None:
            return
        if other.permissions:
            self.permissions = other.permissions
        if other.size:
            self.size = other.size
        if other.filename:
            self.filename = other.filename
        if other.atime:
            self.atime = other.atime
        if other.mtime:
            self.mtime = other.mtime
