"""Dict-backed IFileStore for unit tests and local runs."""

from __future__ import annotations

from wirebatch.core.exceptions import FileStoreError


class MemoryFileStore:
    """Keeps written artifacts in memory, with their content types."""

    def __init__(self) -> None:
        self._files: dict[str, tuple[bytes, str]] = {}

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self._files[path] = (data, content_type)
        return path

    def read(self, path: str) -> bytes:
        try:
            return self._files[path][0]
        except KeyError:
            raise FileStoreError(f"No such file: {path!r}") from None

    def content_type(self, path: str) -> str:
        return self._files[path][1]

    @property
    def paths(self) -> list[str]:
        return sorted(self._files)
