"""Ordered collection of work items, the single source of truth for a batch."""

import dataclasses
import uuid
from typing import Iterable

from script_voicer.models import (
    BatchProgress,
    ItemStatus,
    ResourceHandle,
    ScriptRow,
    WorkItem,
)
from script_voicer.resources import AudioResourceManager

RUNNABLE_STATUSES = (ItemStatus.PENDING, ItemStatus.FAILED)


class WorkItemStore:
    """Holds WorkItem snapshots in row order behind a narrow mutation API.

    Items are frozen; every transition swaps in a new snapshot, so anything
    returned by ``items()`` or ``get()`` stays consistent after the store
    moves on. Only the scheduler calls the ``mark_*`` methods.
    """

    def __init__(self, resources: AudioResourceManager):
        self.resources = resources
        self._items: list[WorkItem] = []
        self._index: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._items)

    def load(self, rows: Iterable[ScriptRow]) -> list[WorkItem]:
        """Replace the batch with one Pending item per row."""
        self.clear()
        batch_tag = uuid.uuid4().hex[:8]
        for index, row in enumerate(rows):
            item = WorkItem(id=f"{index:04d}-{batch_tag}", row=row)
            self._index[item.id] = len(self._items)
            self._items.append(item)
        return list(self._items)

    def items(self) -> tuple[WorkItem, ...]:
        return tuple(self._items)

    def get(self, item_id: str) -> WorkItem:
        return self._items[self._index[item_id]]

    def select_runnable(self) -> list[str]:
        """Ids of items a run should process: Pending or Failed, in row order."""
        return [item.id for item in self._items if item.status in RUNNABLE_STATUSES]

    def _replace(self, item_id: str, **changes) -> WorkItem:
        pos = self._index[item_id]
        item = dataclasses.replace(self._items[pos], **changes)
        self._items[pos] = item
        return item

    def mark_in_flight(self, item_id: str) -> WorkItem:
        self.resources.release(self.get(item_id).handle)
        return self._replace(item_id, status=ItemStatus.IN_FLIGHT, handle=None, error=None)

    def mark_succeeded(self, item_id: str, handle: ResourceHandle) -> WorkItem:
        previous = self.get(item_id).handle
        if previous is not None and previous.id != handle.id:
            self.resources.release(previous)
        return self._replace(item_id, status=ItemStatus.SUCCEEDED, handle=handle, error=None)

    def mark_failed(self, item_id: str, message: str) -> WorkItem:
        self.resources.release(self.get(item_id).handle)
        return self._replace(item_id, status=ItemStatus.FAILED, handle=None, error=message)

    def progress(self) -> BatchProgress:
        succeeded = sum(1 for i in self._items if i.status is ItemStatus.SUCCEEDED)
        failed = sum(1 for i in self._items if i.status is ItemStatus.FAILED)
        total = len(self._items)
        return BatchProgress(
            total=total,
            succeeded=succeeded,
            failed=failed,
            pending=total - succeeded - failed,
        )

    def clear(self) -> None:
        """Drop every item and release the clips they hold."""
        for item in self._items:
            self.resources.release(item.handle)
        self._items = []
        self._index = {}
