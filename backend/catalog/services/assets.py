"""
Image asset lifecycle on the local asset area.

An AssetRef is the public path of a stored file, e.g. "/uploads/1718.png".
Only names this module generates are accepted back: a numeric stem plus
an optional short lower-case extension. Anything else, and anything that
would resolve outside the asset root, is rejected before touching disk.

Release is best-effort. A failed unlink is logged and swallowed: losing
a stale file is tolerable, failing a record mutation over it is not.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections import deque
from collections.abc import Callable
from pathlib import Path, PurePosixPath

from catalog.core.errors import InvalidAssetRef, StorageError, ValidationError

logger = logging.getLogger(__name__)

_SAFE_NAME = re.compile(r"^[0-9]+(?:\.[a-z0-9]{1,10})?$")
_MAX_EXT_LEN = 10


def safe_extension(original_name: str | None) -> str:
    """
    Extension of an uploaded filename, reduced to [a-z0-9].

    Directory parts (either slash style) are discarded first, so
    "../../etc/passwd" and "C:\\evil\\x.PNG" yield "" and ".png".
    """
    if not original_name:
        return ""
    basename = PurePosixPath(original_name.replace("\\", "/")).name
    suffix = PurePosixPath(basename).suffix.lower().lstrip(".")
    suffix = re.sub(r"[^a-z0-9]", "", suffix)[:_MAX_EXT_LEN]
    return f".{suffix}" if suffix else ""


class AssetManager:
    """Owns every file under `root`; nothing else writes there."""

    def __init__(
        self,
        root: Path,
        url_prefix: str = "/uploads",
        *,
        max_bytes: int | None = None,
        clock: Callable[[], int] = time.time_ns,
        release_log_size: int = 256,
    ) -> None:
        self.root = Path(root).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_bytes = max_bytes
        self._clock = clock
        self._pending: set[asyncio.Task[bool]] = set()
        # Most recent refs handed to schedule_release, oldest first
        self.release_log: deque[str] = deque(maxlen=release_log_size)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    # ── Refs ────────────────────────────────────────────────
    def ref_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def resolve(self, ref: str) -> Path:
        """
        Map an AssetRef to its file path inside the asset root.

        Raises InvalidAssetRef for foreign prefixes, traversal attempts
        or names this manager would never have generated.
        """
        prefix = self.url_prefix + "/"
        if not isinstance(ref, str) or not ref.startswith(prefix):
            raise InvalidAssetRef(f"Asset reference outside {self.url_prefix}")

        name = ref[len(prefix):]
        if not _SAFE_NAME.fullmatch(name):
            raise InvalidAssetRef("Invalid asset name")

        path = (self.root / name).resolve()
        if path.parent != self.root:
            raise InvalidAssetRef("Asset reference escapes the asset area")
        return path

    def exists(self, ref: str) -> bool:
        try:
            return self.resolve(ref).is_file()
        except InvalidAssetRef:
            return False

    # ── Store ───────────────────────────────────────────────
    async def store_new(self, data: bytes, original_name: str | None) -> str:
        """
        Write `data` under a fresh, collision-free name and return its ref.

        Raises ValidationError for empty/oversized data and StorageError
        if the write fails (no partial file is left behind).
        """
        if not data:
            raise ValidationError("Uploaded image is empty")
        if self.max_bytes is not None and len(data) > self.max_bytes:
            raise ValidationError(
                f"Image exceeds the {self.max_bytes} byte limit"
            )

        filename = await asyncio.to_thread(
            self._write_exclusive, data, safe_extension(original_name)
        )
        ref = self.ref_for(filename)
        logger.info("Stored asset %s (%d bytes)", ref, len(data))
        return ref

    def _write_exclusive(self, data: bytes, ext: str) -> str:
        stem = self._clock()
        while True:
            path = self.root / f"{stem}{ext}"
            try:
                fh = path.open("xb")
            except FileExistsError:
                stem += 1
                continue
            except OSError as exc:
                logger.exception("Could not create asset file %s", path)
                raise StorageError("Failed to store the image") from exc

            try:
                with fh:
                    fh.write(data)
            except OSError as exc:
                logger.exception("Could not write asset file %s", path)
                path.unlink(missing_ok=True)
                raise StorageError("Failed to store the image") from exc
            return path.name

    # ── Release ─────────────────────────────────────────────
    async def release(self, ref: str) -> bool:
        """Delete the file behind `ref`. Never raises; returns success."""
        try:
            path = self.resolve(ref)
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            logger.warning("Asset %s was already gone", ref)
            return False
        except (InvalidAssetRef, OSError):
            logger.exception("Failed to release asset %s", ref)
            return False

        logger.info("Released asset %s", ref)
        return True

    def schedule_release(self, ref: str) -> asyncio.Task[bool]:
        """
        Fire-and-forget release. The caller does not wait for the unlink;
        drain() awaits everything still outstanding.
        """
        self.release_log.append(ref)
        task = asyncio.get_running_loop().create_task(
            self.release(ref), name=f"release-asset:{ref}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*self._pending)
