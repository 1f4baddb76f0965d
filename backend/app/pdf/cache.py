"""Disk cache for generated PDFs, keyed by a digest of their source data.

Files live at ``<root>/<category>/<slug>-itinerary.pdf`` with the source digest
in a ``.sha256`` sidecar next to them. A file is served only while the sidecar
matches the digest of the current data, so edits to a destination are picked
up without deleting files by hand. A file without a sidecar is treated as
stale.
"""

import logging
import os
import tempfile
from pathlib import Path

from backend.app.models.common import slugify

logger = logging.getLogger(__name__)

# Category directories under the downloads root
PREMIUM_CATEGORY = "itineraries"
GUIDE_CATEGORY = "guides"
SNOWBIRD_CATEGORY = "snowbird-itineraries"


def atomic_write(path: Path, data: bytes) -> None:
    """Write via a temp file in the same directory and rename over the target."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class DocumentCache:
    """Content-hash keyed PDF cache rooted at the public downloads directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, category: str, name: str) -> Path:
        """Deterministic cache path for a document name."""
        return self.root / category / f"{slugify(name)}-itinerary.pdf"

    @staticmethod
    def _digest_path(path: Path) -> Path:
        return path.with_name(f"{path.name}.sha256")

    def public_url(self, category: str, name: str) -> str:
        """URL path the document is served under when the root is web-exposed."""
        return f"/downloads/{category}/{self.path_for(category, name).name}"

    def load(self, category: str, name: str, digest: str) -> bytes | None:
        """Return cached bytes when the stored digest matches, else None."""
        path = self.path_for(category, name)
        try:
            stored = self._digest_path(path).read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        if stored != digest:
            logger.info(f"Cached document {path.name} is stale, regenerating")
            return None
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def store(self, category: str, name: str, digest: str, content: bytes) -> Path:
        """Write a document and its digest.

        The PDF is replaced before the sidecar, so a reader never pairs a new
        digest with an old file. Concurrent writers race benignly: last one wins.

        Returns:
            Path of the cached PDF
        """
        path = self.path_for(category, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(path, content)
        atomic_write(self._digest_path(path), digest.encode("utf-8"))
        return path

    def invalidate(self, category: str, name: str) -> None:
        """Drop a cached document and its sidecar if present."""
        path = self.path_for(category, name)
        self._digest_path(path).unlink(missing_ok=True)
        path.unlink(missing_ok=True)
