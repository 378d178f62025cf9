"""Filesystem-backed host for running downloads outside a browser.

``LocalHost`` exposes both capabilities the transport looks for:

- a save picker that writes into ``save_dir`` (confirmed path); an optional
  ``confirm`` callback decides whether the "dialog" was accepted.
- a document + object URL registry whose anchor click copies the blob into
  ``downloads_dir`` (fallback path).
"""

from __future__ import annotations

import itertools
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from csvexport.io.protocols import Blob, HostEnvironment


class PickerError(Exception):
    """Save picker failure carrying a DOM-style exception name."""

    name = "Error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class AbortError(PickerError):
    name = "AbortError"


class NotAllowedError(PickerError):
    name = "NotAllowedError"


class SecurityError(PickerError):
    name = "SecurityError"


def _safe_file_name(name: str) -> str:
    cleaned = "".join(
        ch if ch.isalnum() or ch in ("_", "-", ".", " ") else "_"
        for ch in Path(name).name.strip()
    )
    return cleaned or "export.csv"


class AtomicFileWritable:
    """Write into a temp file beside ``dest``; ``close`` moves it into place."""

    def __init__(self, dest: Path):
        self.dest = dest
        self.dest.parent.mkdir(parents=True, exist_ok=True)
        tmp = tempfile.NamedTemporaryFile(dir=str(self.dest.parent), delete=False)
        self.tmp_path = Path(tmp.name)
        self._fh = tmp

    async def write(self, data: Blob) -> None:
        try:
            self._fh.write(data.data)
        except Exception:
            self._discard()
            raise

    async def close(self) -> None:
        try:
            self._fh.close()
            os.replace(self.tmp_path, self.dest)
        except Exception:
            self._discard()
            raise

    def _discard(self) -> None:
        self._fh.close()
        self.tmp_path.unlink(missing_ok=True)


@dataclass(frozen=True)
class LocalFileHandle:
    path: Path

    async def create_writable(self) -> AtomicFileWritable:
        return AtomicFileWritable(self.path)


class DirectorySavePicker:
    def __init__(
        self,
        directory: Path,
        *,
        confirm: Optional[Callable[[Path], bool]] = None,
    ) -> None:
        self.directory = Path(directory)
        self.confirm = confirm

    async def __call__(
        self,
        *,
        suggested_name: str,
        types: Sequence[dict[str, Any]],
    ) -> LocalFileHandle:
        if not self.directory.is_dir():
            raise SecurityError(f"save directory is not available: {self.directory}")
        target = self.directory / _safe_file_name(suggested_name)
        if self.confirm is not None and not self.confirm(target):
            raise AbortError("The user aborted a request.")
        return LocalFileHandle(target)


class ObjectUrlRegistry:
    """In-memory ``blob:`` URLs, valid until revoked."""

    def __init__(self) -> None:
        self._blobs: dict[str, Blob] = {}
        self._ids = itertools.count(1)

    def create(self, blob: Blob) -> str:
        url = f"blob:local/{next(self._ids)}"
        self._blobs[url] = blob
        return url

    def revoke(self, url: str) -> None:
        self._blobs.pop(url, None)

    def resolve(self, url: str) -> Blob:
        try:
            return self._blobs[url]
        except KeyError as exc:
            raise ValueError(f"object URL {url!r} is not registered") from exc

    def __len__(self) -> int:
        return len(self._blobs)


@dataclass
class LocalAnchor:
    owner: "DownloadsDocument"
    href: str = ""
    download: str = ""
    rel: str = ""
    style: dict[str, str] = field(default_factory=dict)

    def click(self) -> None:
        self.owner.follow(self)


class DownloadsDocument:
    def __init__(self, directory: Path, urls: ObjectUrlRegistry) -> None:
        self.directory = Path(directory)
        self.urls = urls
        self.body: list[LocalAnchor] = []
        self.downloaded: list[Path] = []

    def create_anchor(self) -> LocalAnchor:
        return LocalAnchor(owner=self)

    def append(self, element: LocalAnchor) -> None:
        self.body.append(element)

    def remove(self, element: LocalAnchor) -> None:
        self.body.remove(element)

    def follow(self, anchor: LocalAnchor) -> None:
        if anchor not in self.body:
            raise RuntimeError("anchor must be attached to the document before click")
        blob = self.urls.resolve(anchor.href)
        self.directory.mkdir(parents=True, exist_ok=True)
        dest = self.directory / _safe_file_name(anchor.download)
        dest.write_bytes(blob.data)
        self.downloaded.append(dest)


def LocalHost(
    *,
    save_dir: Optional[Path] = None,
    downloads_dir: Optional[Path] = None,
    confirm: Optional[Callable[[Path], bool]] = None,
) -> HostEnvironment:
    """Build a host with a picker (when ``save_dir``) and/or anchor downloads."""
    picker = DirectorySavePicker(save_dir, confirm=confirm) if save_dir is not None else None
    document = None
    urls = None
    if downloads_dir is not None:
        urls = ObjectUrlRegistry()
        document = DownloadsDocument(downloads_dir, urls)
    return HostEnvironment(save_file_picker=picker, document=document, urls=urls)
