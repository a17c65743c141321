"""Fire-and-forget forwarding of committed rows to the mirror store."""

import asyncio
from dataclasses import dataclass
from typing import Any

from mindtest.core.logging import get_logger

from .base import BaseMirrorStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class MirrorWrite:
    """One row waiting to be copied to the mirror."""

    table: str  # events | results
    row: dict[str, Any]


class MirrorForwarder:
    """
    Bounded queue drained by a single background worker.

    The request path only calls ``submit``, which never blocks and never
    raises. A full queue drops the write. Failed writes are logged and lost;
    there is no retry.
    """

    def __init__(self, store: BaseMirrorStore, max_queue_size: int = 1000) -> None:
        self.store = store
        self._queue: asyncio.Queue[MirrorWrite] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task[None] | None = None

    @property
    def enabled(self) -> bool:
        return self.store.enabled

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, table: str, row: dict[str, Any]) -> bool:
        """Queue a row for mirroring. Returns False if it was dropped."""
        if not self.enabled:
            return False
        try:
            self._queue.put_nowait(MirrorWrite(table=table, row=row))
        except asyncio.QueueFull:
            logger.bind(table=table, row_id=row.get("id")).warning("mirror_queue_full")
            return False
        return True

    async def start(self) -> None:
        if self._worker is None and self.enabled:
            self._worker = asyncio.create_task(self._run(), name="mirror-forwarder")
            logger.bind(provider=self.store.provider_name).info("mirror_forwarder_started")

    async def stop(self, timeout: float = 5.0) -> None:
        """Give queued writes a short grace period, then cancel the worker."""
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except TimeoutError:
            logger.bind(pending=self.pending).warning("mirror_forwarder_stop_timeout")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("mirror_forwarder_stopped")

    async def join(self) -> None:
        """Wait until every queued write has been attempted."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            write = await self._queue.get()
            try:
                await self._forward(write)
            except Exception as e:
                logger.bind(
                    table=write.table,
                    row_id=write.row.get("id"),
                    error=str(e),
                ).error("mirror_write_failed")
            finally:
                self._queue.task_done()

    async def _forward(self, write: MirrorWrite) -> None:
        if write.table == "events":
            await self.store.insert_event(write.row)
        elif write.table == "results":
            await self.store.insert_result(write.row)
        else:
            raise ValueError(f"Unknown mirror table: {write.table}")
