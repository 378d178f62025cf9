"""Hand finished CSV text to the host as a downloadable file.

Two strategies, picked once per call from host capabilities:

- native: a save-file picker; success is confirmed by the write completing.
- anchor: object URL + synthetic anchor click; success cannot be observed.

A user cancel on the native path ends the call with ``False``. Any other
native failure falls through to the anchor strategy.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from csvexport.io.protocols import Blob, HostEnvironment

logger = logging.getLogger(__name__)

BOM = "\ufeff"
CSV_MIME_TYPE = "text/csv;charset=utf-8;"
DEFAULT_FILE_NAME = "export.csv"
CSV_FILE_TYPES = ({"description": "CSV", "accept": {"text/csv": [".csv"]}},)


class TransportStrategy(str, Enum):
    NATIVE = "native"
    ANCHOR = "anchor"


class NativeSaveOutcome(str, Enum):
    WRITTEN = "written"
    CANCELED = "canceled"
    UNAVAILABLE = "unavailable"


def csv_blob(content: str) -> Blob:
    return Blob(data=f"{BOM}{content}".encode("utf-8"), type=CSV_MIME_TYPE)


def detect_strategy(host: HostEnvironment) -> TransportStrategy:
    if host.can_pick:
        return TransportStrategy.NATIVE
    return TransportStrategy.ANCHOR


def is_user_cancel(exc: BaseException) -> bool:
    """True for an explicit dialog dismissal or a missing user gesture."""
    name = getattr(exc, "name", None) or type(exc).__name__
    if name == "AbortError":
        return True
    message = getattr(exc, "message", None) or str(exc)
    return name == "NotAllowedError" and "user gesture" in message


async def save_native(host: HostEnvironment, blob: Blob, file_name: str) -> NativeSaveOutcome:
    picker = host.save_file_picker
    if picker is None:
        return NativeSaveOutcome.UNAVAILABLE
    try:
        handle = await picker(suggested_name=file_name, types=list(CSV_FILE_TYPES))
        writable = await handle.create_writable()
        await writable.write(blob)
        await writable.close()
    except Exception as exc:
        if is_user_cancel(exc):
            logger.error("download: user canceled save picker: %s", exc)
            return NativeSaveOutcome.CANCELED
        logger.warning("download: save picker failed, falling back to anchor: %s", exc)
        return NativeSaveOutcome.UNAVAILABLE
    return NativeSaveOutcome.WRITTEN


def save_anchor(host: HostEnvironment, blob: Blob, file_name: str) -> bool:
    document = host.document
    urls = host.urls
    if document is None or urls is None:
        logger.error("download: host exposes no document/object URL support")
        return False
    try:
        url = urls.create(blob)
        link = document.create_anchor()
        link.href = url
        link.download = file_name
        link.rel = "noopener"
        link.style["position"] = "fixed"
        link.style["left"] = "-9999px"
        document.append(link)
        link.click()
        document.remove(link)
        urls.revoke(url)
    except Exception as exc:
        logger.error("download: anchor fallback failed: %s", exc)
        return False
    return True


async def download(
    content: str,
    file_name: str,
    *,
    host: Optional[HostEnvironment] = None,
) -> bool:
    """Offer ``content`` as a CSV file named ``file_name``.

    ``True`` means written through the picker, or the anchor fallback ran
    without error (delivery is not guaranteed). ``False`` means the user
    canceled or the fallback itself failed. Never raises.
    """
    host = host or HostEnvironment()
    file_name = file_name or DEFAULT_FILE_NAME
    blob = csv_blob(content)
    strategy = detect_strategy(host)
    logger.debug("download: %s strategy for %s (%d bytes)", strategy.value, file_name, blob.size)

    if strategy is TransportStrategy.NATIVE:
        outcome = await save_native(host, blob, file_name)
        if outcome is NativeSaveOutcome.WRITTEN:
            logger.debug("download: %s written via save picker", file_name)
            return True
        if outcome is NativeSaveOutcome.CANCELED:
            return False

    return save_anchor(host, blob, file_name)
