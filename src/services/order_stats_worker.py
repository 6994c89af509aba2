"""Applies post-commit order statistics from the outbox table.

Every committed order leaves one ``order_stat_events`` row written in the
same database transaction as the order. The worker applies it right after
checkout in a tracked task (customer lifetime totals, product sales
counters) and a periodic sweep re-applies anything left unprocessed, for
example after a crash or a failed attempt. Failures never reach the
checkout caller.
"""

from __future__ import annotations

import asyncio
import logging

from supabase import Client

from src.core.config import Settings

logger = logging.getLogger(__name__)


class OrderStatsWorker:
    """Outbox consumer for order denormalization."""

    def __init__(
        self,
        client: Client,
        sweep_interval_seconds: int = 60,
        batch_size: int = 50,
    ) -> None:
        self.client = client
        self.sweep_interval_seconds = sweep_interval_seconds
        self.batch_size = batch_size
        self._pending: set[asyncio.Task] = set()
        self._sweep_task: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, client: Client, settings: Settings) -> OrderStatsWorker:
        """Build a worker with the configured sweep interval and batch size."""
        return cls(
            client,
            sweep_interval_seconds=settings.order_stats_sweep_interval_seconds,
            batch_size=settings.order_stats_sweep_batch_size,
        )

    def schedule(self, event_id: str) -> asyncio.Task:
        """Apply an event in the background without blocking the caller.

        The task is kept referenced until it finishes; its outcome is logged.
        """
        task = asyncio.create_task(self.apply_event(event_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def apply_event(self, event_id: str) -> bool:
        """Apply one event; returns False if it failed or was already applied."""
        try:
            response = self.client.rpc("apply_order_stats", {"p_event_id": event_id}).execute()
        except Exception as e:
            logger.exception("Failed to apply order stats event %s", event_id)
            self._record_failure(event_id, str(e))
            return False

        applied = bool(response.data)
        if applied:
            logger.debug("Applied order stats event %s", event_id)
        return applied

    def _record_failure(self, event_id: str, error: str) -> None:
        try:
            self.client.rpc(
                "record_order_stats_failure",
                {"p_event_id": event_id, "p_error": error},
            ).execute()
        except Exception:
            logger.exception("Failed to record failure for order stats event %s", event_id)

    async def sweep(self) -> int:
        """Apply up to batch_size unprocessed events, oldest first.

        Returns:
            int: Number of events applied.
        """
        response = (
            self.client.table("order_stat_events")
            .select("id")
            .is_("processed_at", "null")
            .order("created_at")
            .limit(self.batch_size)
            .execute()
        )

        applied = 0
        for event in response.data or []:
            if await self.apply_event(event["id"]):
                applied += 1
        return applied

    async def start_sweep_task(self) -> None:
        """Start the periodic sweep."""
        if self._sweep_task is None:
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            logger.info("Order stats sweep task started")

    async def stop_sweep_task(self) -> None:
        """Stop the periodic sweep and wait for in-flight events."""
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
            logger.info("Order stats sweep task stopped")

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                count = await self.sweep()
            except Exception:
                logger.exception("Order stats sweep failed")
                continue
            if count > 0:
                logger.info("Order stats sweep applied %d event(s)", count)
