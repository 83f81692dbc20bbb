"""Removal executor.

Issues one removal request per id in a RemovalSet against the external
deletion interface, with bounded concurrency, retry of transient failures,
and per-item failure isolation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..backends.base import ResourceRemover
from ..errors import RemovalCancelled, ResourceNotFound, TransientRemovalError
from ..models.removal import RemovalOutcome, RemovalSet

logger = logging.getLogger(__name__)


class RemovalExecutor:
    """Batch-tolerant removal of resources.

    Every id in the removal set gets exactly one outcome. A failed request
    never stops the batch. ``ResourceNotFound`` from the remover is a benign
    ``absent`` outcome so that re-runs are idempotent. Only ids present in
    the removal set are ever passed to the remover. A dispatched request is
    never cancelled or re-sent while unresolved; a request outliving
    ``request_timeout`` is logged and awaited, and holds its concurrency slot.

    Attributes:
        remover: Deletion interface of the external system
        max_concurrency: Maximum in-flight removal requests
        max_retries: Maximum attempts per id for transient failures
        retry_base_delay: First backoff delay in seconds (doubles per attempt)
        request_timeout: Seconds before a pending request is logged as slow (optional)
    """

    def __init__(
        self,
        remover: ResourceRemover,
        max_concurrency: int = 8,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        request_timeout: Optional[float] = None,
    ) -> None:
        """Initialize removal executor.

        Args:
            remover: Deletion interface of the external system
            max_concurrency: Maximum in-flight requests (default: 8)
            max_retries: Maximum attempts per id (default: 3)
            retry_base_delay: Initial backoff in seconds (default: 1.0)
            request_timeout: Soft deadline per request in seconds (default: none)

        Raises:
            ValueError: If a limit is out of range
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if request_timeout is not None and request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

        self.remover = remover
        self.max_concurrency = max_concurrency
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.request_timeout = request_timeout

    async def remove(self, removal_set: RemovalSet) -> list[RemovalOutcome]:
        """Remove every id in the set and join all outcomes.

        If the caller is cancelled mid-batch, requests not yet dispatched are
        recorded as skipped and never sent, and dispatched requests are
        awaited to completion (further cancellations included). The
        cancellation then propagates as ``RemovalCancelled`` carrying every
        outcome.

        Args:
            removal_set: Ids to remove

        Returns:
            One outcome per id, in removal set order

        Raises:
            RemovalCancelled: If the caller was cancelled mid-batch
        """
        if not removal_set:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)
        halt = asyncio.Event()
        batch = asyncio.gather(*(self._remove_one(resource_id, semaphore, halt) for resource_id in removal_set.ids))

        try:
            outcomes = await asyncio.shield(batch)
        except asyncio.CancelledError:
            halt.set()
            logger.warning("Removal batch cancelled; waiting for dispatched requests to finish")
            outcomes = await self._drain(batch)
            self._log_totals(outcomes)
            raise RemovalCancelled(list(outcomes))

        self._log_totals(outcomes)
        return list(outcomes)

    @staticmethod
    async def _drain(batch: asyncio.Future) -> list[RemovalOutcome]:
        # Dispatched requests cannot be recalled, so repeated cancellation only re-waits
        while True:
            try:
                return await asyncio.shield(batch)
            except asyncio.CancelledError:
                if batch.done():
                    return batch.result()
                logger.warning("Removal batch cancelled again; still waiting for dispatched requests")

    async def _remove_one(self, resource_id: str, semaphore: asyncio.Semaphore, halt: asyncio.Event) -> RemovalOutcome:
        async with semaphore:
            if halt.is_set():
                return RemovalOutcome.skipped(resource_id, "batch cancelled before dispatch")
            return await self._attempt_with_retries(resource_id, halt)

    async def _attempt_with_retries(self, resource_id: str, halt: asyncio.Event) -> RemovalOutcome:
        last_error = ""
        attempts = 0
        for attempt in range(1, self.max_retries + 1):
            attempts = attempt
            try:
                success, error = await self._attempt_removal(resource_id)
            except ResourceNotFound as e:
                logger.info(f"Resource {resource_id} already absent")
                return RemovalOutcome.absent(resource_id, str(e), attempts=attempt)
            except (TransientRemovalError, asyncio.TimeoutError, TimeoutError) as e:
                last_error = str(e) or "request timed out"
                if attempt < self.max_retries and not halt.is_set():
                    wait_time = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.debug(
                        f"Transient failure removing {resource_id}: {last_error}, "
                        f"retrying in {wait_time}s (attempt {attempt}/{self.max_retries})"
                    )
                    await asyncio.sleep(wait_time)
                    if not halt.is_set():
                        continue
                break
            except Exception as e:
                reason = f"Unexpected error: {type(e).__name__}: {e}"
                logger.error(f"Failed to remove {resource_id}: {reason}")
                return RemovalOutcome.failed(resource_id, reason, attempts=attempt)

            if success:
                logger.info(f"Removed {resource_id}")
                return RemovalOutcome.succeeded(resource_id, attempts=attempt)

            reason = error or "remover reported failure"
            logger.warning(f"Failed to remove {resource_id}: {reason}")
            return RemovalOutcome.failed(resource_id, reason, attempts=attempt)

        if halt.is_set() and attempts < self.max_retries:
            reason = f"Retry abandoned after {attempts} attempts (batch cancelled): {last_error}"
        else:
            reason = f"Failed after {attempts} attempts: {last_error}"
        logger.error(f"Failed to remove {resource_id}: {reason}")
        return RemovalOutcome.failed(resource_id, reason, attempts=attempts)

    async def _attempt_removal(self, resource_id: str) -> tuple[bool, Optional[str]]:
        request = asyncio.ensure_future(self.remover.remove_resource(resource_id))
        if self.request_timeout is not None:
            done, _ = await asyncio.wait({request}, timeout=self.request_timeout)
            if not done:
                # The request is already with the external system; wait for its real result
                logger.warning(
                    f"Removal of {resource_id} still pending after {self.request_timeout}s; "
                    f"waiting for the dispatched request to finish"
                )
        result = await request

        # Removers may return a bare bool or None instead of (success, error)
        if isinstance(result, tuple):
            return bool(result[0]), result[1] if len(result) > 1 else None
        if result is None:
            return True, None
        return bool(result), None

    def _log_totals(self, outcomes: list[RemovalOutcome]) -> None:
        counts: dict[str, int] = {}
        for outcome in outcomes:
            counts[outcome.status.value] = counts.get(outcome.status.value, 0) + 1
        logger.info(
            "Removal batch finished: " + ", ".join(f"{status}={count}" for status, count in sorted(counts.items()))
        )
