# FILE: pcr_app/services/pdf_artifacts.py
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from pcr_app.core.config import settings

logger = logging.getLogger(__name__)


class ObjectUrlRegistry:
    """
    Process-wide map of object URL -> PDF bytes, the only state shared
    between generations. Every URL handed out must be revoked by its last user.
    """

    def __init__(self, prefix: Optional[str] = None):
        self._prefix = prefix or settings.PDF_OBJECT_URL_PREFIX
        self._lock = threading.Lock()
        self._items: Dict[str, bytes] = {}

    def create(self, content: bytes) -> str:
        url = f"{self._prefix}:{uuid.uuid4().hex}"
        with self._lock:
            self._items[url] = content
        return url

    def resolve(self, url: str) -> Optional[bytes]:
        with self._lock:
            return self._items.get(url)

    def revoke(self, url: str) -> bool:
        with self._lock:
            return self._items.pop(url, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._items


registry = ObjectUrlRegistry()


@dataclass(frozen=True)
class PdfArtifact:
    content: bytes = field(repr=False)
    url: str
    filename: str
    size: int

    def release(self) -> None:
        if registry.revoke(self.url):
            logger.debug("Revoked object URL %s", self.url)

    def __enter__(self) -> "PdfArtifact":
        return self

    def __exit__(self, *exc) -> None:
        self.release()
