from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence


@dataclass(frozen=True)
class Blob:
    data: bytes
    type: str

    @property
    def size(self) -> int:
        return len(self.data)


class WritableFileStream(Protocol):
    async def write(self, data: Blob) -> None:
        ...

    async def close(self) -> None:
        ...


class FileHandle(Protocol):
    async def create_writable(self) -> WritableFileStream:
        ...


class SaveFilePicker(Protocol):
    async def __call__(
        self,
        *,
        suggested_name: str,
        types: Sequence[dict[str, Any]],
    ) -> FileHandle:
        ...


class Anchor(Protocol):
    href: str
    download: str
    rel: str
    style: dict[str, str]

    def click(self) -> None:
        ...


class Document(Protocol):
    def create_anchor(self) -> Anchor:
        ...

    def append(self, element: Anchor) -> None:
        ...

    def remove(self, element: Anchor) -> None:
        ...


class ObjectUrlFactory(Protocol):
    def create(self, blob: Blob) -> str:
        ...

    def revoke(self, url: str) -> None:
        ...


@dataclass
class HostEnvironment:
    """Capabilities a download can use; any of them may be absent."""

    save_file_picker: Optional[SaveFilePicker] = None
    document: Optional[Document] = None
    urls: Optional[ObjectUrlFactory] = None

    @property
    def can_pick(self) -> bool:
        return callable(self.save_file_picker)
