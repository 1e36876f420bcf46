"""
Delivery of rendered invoices: stored file, in-memory preview handle, or a
platform share sheet with a download fallback.
"""
from __future__ import annotations

import enum
import logging
import secrets
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol

from config import Config
from formatting import safe_filename
from models import BusinessProfile, Invoice
from pdf_service import render_invoice_pdf

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"
FILENAME_PREFIX = "Facture"


def invoice_filename(inv: Invoice) -> str:
    number = safe_filename(inv.number or "", fallback="")
    if not number:
        return f"{FILENAME_PREFIX}.pdf"
    return f"{FILENAME_PREFIX}-{number}.pdf"


# -----------------------------
# File
# -----------------------------
def to_file(
    inv: Invoice,
    profile: BusinessProfile,
    out_dir: str | Path | None = None,
    filename: str | None = None,
) -> Path:
    """Render and write the PDF into the exports directory. Returns the path."""
    target_dir = Path(out_dir or Config.EXPORTS_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / (filename or invoice_filename(inv))
    path.write_bytes(render_invoice_pdf(inv, profile))
    logger.info("Stored invoice PDF %s", path)
    return path


# -----------------------------
# Preview handles
# -----------------------------
class PreviewHandle:
    """
    In-memory PDF referenced by an opaque token. Release it when the preview
    closes; release() is idempotent and a `with` block releases on exit.
    """

    def __init__(self, registry: "PreviewRegistry", token: str, filename: str, data: bytes):
        self._registry = registry
        self.token = token
        self.filename = filename
        self.data = data

    @property
    def url(self) -> str:
        return f"/previews/{self.token}"

    @property
    def released(self) -> bool:
        return self._registry.get(self.token) is not self

    def release(self) -> bool:
        return self._registry.revoke(self.token)

    def __enter__(self) -> "PreviewHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class PreviewRegistry:
    def __init__(self):
        self._handles: dict[str, PreviewHandle] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def open(self, inv: Invoice, profile: BusinessProfile) -> PreviewHandle:
        data = render_invoice_pdf(inv, profile)
        token = secrets.token_urlsafe(16)
        handle = PreviewHandle(self, token, invoice_filename(inv), data)
        with self._lock:
            self._handles[token] = handle
        logger.debug("Opened preview %s for invoice %s", token, inv.number or "?")
        return handle

    def get(self, token: str) -> Optional[PreviewHandle]:
        with self._lock:
            return self._handles.get(token)

    def revoke(self, token: str) -> bool:
        """Drop the handle. Returns False when it was already released."""
        with self._lock:
            handle = self._handles.pop(token, None)
        if handle is None:
            return False
        handle.data = b""
        logger.debug("Revoked preview %s", token)
        return True

    def close(self) -> None:
        with self._lock:
            tokens = list(self._handles)
        for token in tokens:
            self.revoke(token)


# -----------------------------
# Share
# -----------------------------
class ShareCancelled(Exception):
    """Raised by a share target when the user dismisses the share sheet."""


@dataclass(frozen=True)
class SharePayload:
    filename: str
    data: bytes = field(repr=False)
    title: str
    text: str
    mimetype: str = PDF_MIMETYPE


class ShareTarget(Protocol):
    def can_share(self, payload: SharePayload) -> bool: ...

    async def share(self, payload: SharePayload) -> None: ...


class ShareOutcome(str, enum.Enum):
    SHARED = "shared"
    CANCELLED = "cancelled"
    DOWNLOADED = "downloaded"


@dataclass(frozen=True)
class ShareResult:
    outcome: ShareOutcome
    path: Optional[Path] = None


def share_payload(inv: Invoice, data: bytes) -> SharePayload:
    return SharePayload(
        filename=invoice_filename(inv),
        data=data,
        title=f"{FILENAME_PREFIX} {inv.number or ''}".strip(),
        text=f"Voici la facture de {inv.client_name}",
    )


async def share(
    inv: Invoice,
    profile: BusinessProfile,
    target: ShareTarget | None = None,
    fallback: Callable[[Invoice, BusinessProfile], Path] = to_file,
) -> ShareResult:
    """
    Hand the PDF to the platform share sheet when there is one.

    A user cancel is a normal outcome and downloads nothing. No target, an
    unsupported payload or a platform failure falls back to `fallback`.
    """
    if target is not None:
        payload = share_payload(inv, render_invoice_pdf(inv, profile))
        try:
            supported = bool(target.can_share(payload))
        except Exception as e:
            logger.warning("Share capability check failed: %s", e)
            supported = False

        if supported:
            try:
                await target.share(payload)
                return ShareResult(ShareOutcome.SHARED)
            except ShareCancelled:
                logger.info("Share of invoice %s cancelled by user", inv.number or "?")
                return ShareResult(ShareOutcome.CANCELLED)
            except Exception as e:
                logger.warning("Share failed, falling back to download: %s", e)
        else:
            logger.info("Share target cannot take %s, falling back to download", payload.filename)

    return ShareResult(ShareOutcome.DOWNLOADED, fallback(inv, profile))
