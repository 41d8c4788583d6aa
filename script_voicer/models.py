"""Data models for batch voice synthesis."""

from dataclasses import dataclass
from enum import Enum

from script_voicer.constants import AUDIO_MIME_TYPE


@dataclass(frozen=True)
class ScriptRow:
    shot: str
    character: str
    voice_id: str
    text: str
    emotion: str | None = None


class ItemStatus(str, Enum):
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ResourceHandle:
    id: str
    path: str
    mime_type: str
    size: int


@dataclass(frozen=True)
class WorkItem:
    id: str
    row: ScriptRow
    status: ItemStatus = ItemStatus.PENDING
    handle: ResourceHandle | None = None   # set iff SUCCEEDED
    error: str | None = None               # set iff FAILED


@dataclass(frozen=True)
class AudioResource:
    data: bytes
    mime_type: str = AUDIO_MIME_TYPE


@dataclass(frozen=True)
class InlineAudio:
    """Hex-encoded audio carried in the response body, already decoded."""
    data: bytes


@dataclass(frozen=True)
class RemoteAudio:
    """Audio the service left at a URL for a follow-up fetch."""
    url: str


@dataclass(frozen=True)
class BatchProgress:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    pending: int = 0       # includes in-flight items


@dataclass(frozen=True)
class RunProgress:
    current: int
    total: int
    item: WorkItem
    batch: BatchProgress
