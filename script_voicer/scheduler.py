"""Sequential batch runner over a WorkItemStore."""

import logging
from typing import AsyncIterator, Callable

from script_voicer.constants import UNKNOWN_ERROR
from script_voicer.errors import (
    BatchAlreadyRunningError,
    MissingCredentialsError,
    NoValidRowsError,
)
from script_voicer.models import BatchProgress, RunProgress
from script_voicer.store import WorkItemStore

logger = logging.getLogger(__name__)


def _failure_message(exc: BaseException) -> str:
    return str(exc).strip() or UNKNOWN_ERROR


class BatchScheduler:
    """Runs synthesis for every Pending or Failed item, one at a time.

    ``client`` is anything with a ``credentials`` attribute and an async
    ``synthesize(row)`` returning an AudioResource; normally a
    ``tts.SynthesisClient``. Items are never dispatched concurrently: the
    service rate-limits bursts.
    """

    def __init__(self, store: WorkItemStore, client):
        self.store = store
        self.client = client
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def check_ready(self) -> None:
        """Raise a BatchError if the batch cannot start."""
        credentials = getattr(self.client, "credentials", None)
        if credentials is None or not credentials.complete:
            raise MissingCredentialsError()
        if len(self.store) == 0:
            raise NoValidRowsError()

    async def iter_batch(self) -> AsyncIterator[RunProgress]:
        """Process the runnable items, yielding progress after each one.

        The runnable subset is fixed when the run starts. Per-item failures are
        recorded on the item and never raised.
        """
        if self._running:
            raise BatchAlreadyRunningError()
        self.check_ready()

        self._running = True
        try:
            selected = self.store.select_runnable()
            total = len(selected)
            logger.info("Starting batch: %d of %d items selected", total, len(self.store))

            for current, item_id in enumerate(selected, start=1):
                item = self.store.mark_in_flight(item_id)
                try:
                    resource = await self.client.synthesize(item.row)
                    handle = self.store.resources.materialize(resource)
                except Exception as e:
                    logger.warning(
                        "Item %s (%s/%s) failed: %s",
                        item_id, item.row.shot, item.row.character, e,
                    )
                    item = self.store.mark_failed(item_id, _failure_message(e))
                else:
                    item = self.store.mark_succeeded(item_id, handle)

                yield RunProgress(
                    current=current,
                    total=total,
                    item=item,
                    batch=self.store.progress(),
                )
        finally:
            self._running = False

    async def run_batch(
        self,
        on_progress: Callable[[RunProgress], None] | None = None,
    ) -> BatchProgress:
        """Drive ``iter_batch`` to completion and return the final counts."""
        async for update in self.iter_batch():
            if on_progress is not None:
                on_progress(update)
        progress = self.store.progress()
        logger.info(
            "Batch finished: %d succeeded, %d failed, %d pending",
            progress.succeeded, progress.failed, progress.pending,
        )
        return progress


async def run_batch(
    store: WorkItemStore,
    client,
    on_progress: Callable[[RunProgress], None] | None = None,
) -> BatchProgress:
    """One-shot convenience wrapper around ``BatchScheduler.run_batch``."""
    return await BatchScheduler(store, client).run_batch(on_progress=on_progress)
