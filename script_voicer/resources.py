"""Local storage for synthesized clips and their release."""

import logging
import os
import shutil
import tempfile
import uuid

from script_voicer.constants import AUDIO_FORMAT
from script_voicer.models import AudioResource, ResourceHandle

logger = logging.getLogger(__name__)


class AudioResourceManager:
    """Owns the files behind every live ResourceHandle.

    Clips are written to a private temporary directory created on first use.
    ``release()`` deletes a clip, ``close()`` deletes all of them and the
    directory.
    """

    def __init__(self, root: str | None = None):
        self._root = root
        self._owns_root = root is None
        self._live: dict[str, ResourceHandle] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def root(self) -> str:
        if self._root is None:
            self._root = tempfile.mkdtemp(prefix="script_voicer_")
        else:
            os.makedirs(self._root, exist_ok=True)
        return self._root

    def materialize(self, resource: AudioResource) -> ResourceHandle:
        """Write ``resource`` to disk and return a handle to it."""
        handle_id = uuid.uuid4().hex
        path = os.path.join(self.root, f"{handle_id}.{AUDIO_FORMAT}")
        with open(path, "wb") as f:
            f.write(resource.data)
        handle = ResourceHandle(
            id=handle_id,
            path=path,
            mime_type=resource.mime_type,
            size=len(resource.data),
        )
        self._live[handle_id] = handle
        logger.debug("Materialized %d bytes at %s", handle.size, path)
        return handle

    def read(self, handle: ResourceHandle) -> bytes:
        if handle.id not in self._live:
            raise KeyError(f"Resource {handle.id} has been released")
        with open(handle.path, "rb") as f:
            return f.read()

    def is_live(self, handle: ResourceHandle) -> bool:
        return handle.id in self._live

    def live_handles(self) -> list[ResourceHandle]:
        return list(self._live.values())

    def release(self, handle: ResourceHandle | None) -> None:
        """Delete the clip behind ``handle``. Releasing twice is a no-op."""
        if handle is None or self._live.pop(handle.id, None) is None:
            return
        try:
            os.remove(handle.path)
        except FileNotFoundError:
            logger.debug("Resource file already gone: %s", handle.path)

    def close(self) -> None:
        for handle in list(self._live.values()):
            self.release(handle)
        if self._owns_root and self._root is not None:
            shutil.rmtree(self._root, ignore_errors=True)
            self._root = None
