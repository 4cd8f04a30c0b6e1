"""Image storage for menu item pictures."""
from __future__ import annotations

import asyncio
import mimetypes
import uuid
from pathlib import Path


class LocalImageStorage:
    """Writes images under ``root`` and returns their public URL under ``url_prefix``."""

    def __init__(self, root: str | Path, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    async def save(self, content: bytes, content_type: str) -> str:
        extension = mimetypes.guess_extension(content_type) or ""
        filename = f"menu_items/{uuid.uuid4().hex}{extension}"
        path = self.root / filename
        await asyncio.to_thread(self._write, path, content)
        return f"{self.url_prefix}/{filename}"

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
