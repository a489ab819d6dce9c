from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, List, Mapping, Optional, Sequence

from .dispatcher import ERROR_DATA_NOT_MAPPING, ERROR_TEMPLATE_NOT_FOUND, DispatchExecutor
from .models import (
    CHANNEL_EMAIL,
    CHANNEL_SMS,
    BatchResult,
    DispatchOptions,
    DispatchResult,
    StatusCounts,
)
from .templates.resolver import TemplateResolver

logger = logging.getLogger("notifyhub.batch")

STATUS_SUCCESS = "success"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


def classify_outcome(result: DispatchResult) -> str:
    """Map a dispatch result onto exactly one batch status."""
    if result.success:
        return STATUS_SUCCESS
    if result.skipped_reason and not result.error:
        return STATUS_SKIPPED
    return STATUS_FAILED


class BatchOrchestrator:
    def __init__(self, executor: DispatchExecutor, resolver: TemplateResolver) -> None:
        self._executor = executor
        self._resolver = resolver

    async def dispatch_batch(
        self,
        recipient_ids: Sequence[str],
        notification_type: str,
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[DispatchOptions] = None,
    ) -> BatchResult:
        options = options or DispatchOptions()
        started = time.perf_counter()
        batch = BatchResult(notification_type=notification_type)

        if isinstance(recipient_ids, (str, bytes)) or not isinstance(recipient_ids, (list, tuple)):
            batch.error = "Recipient IDs must be provided as a list"
            return batch
        if not notification_type or not isinstance(notification_type, str):
            batch.error = "Notification type is required"
            return batch
        if data is not None and not isinstance(data, Mapping):
            batch.error = ERROR_DATA_NOT_MAPPING
            return batch

        logger.info(
            "batch.start",
            extra={"type": notification_type, "recipients": len(recipient_ids), "parallel": options.parallel_send},
        )

        missing = self._preflight_missing(notification_type, options)
        if missing:
            error = f"{ERROR_TEMPLATE_NOT_FOUND}: {', '.join(missing)} template for '{notification_type}'"
            logger.error("batch.preflight_failed", extra={"type": notification_type, "missing": missing})
            batch.error = error
            batch.results = [
                DispatchResult(recipient_id=recipient_id, notification_type=notification_type, error=error)
                for recipient_id in recipient_ids
            ]
        elif options.parallel_send:
            batch.results = list(
                await asyncio.gather(
                    *(
                        self._executor.dispatch(recipient_id, notification_type, data, options)
                        for recipient_id in recipient_ids
                    )
                )
            )
        else:
            batch.results = await self._run_sequential(recipient_ids, notification_type, data, options)

        batch.status_counts = self._tally(batch.results)
        batch.processed_count = len(batch.results)
        batch.success = batch.status_counts.success > 0
        batch.processing_time_seconds = time.perf_counter() - started
        logger.info(
            "batch.complete",
            extra={
                "type": notification_type,
                "processed": batch.processed_count,
                "status_counts": batch.status_counts.to_dict(),
                "seconds": round(batch.processing_time_seconds, 3),
            },
        )
        return batch

    def _preflight_missing(self, notification_type: str, options: DispatchOptions) -> List[str]:
        if not options.validate_templates_first:
            return []
        required = [CHANNEL_EMAIL]
        if options.require_all_channels:
            required.append(CHANNEL_SMS)
        language = self._resolver.default_language
        return [
            channel
            for channel in required
            if self._resolver.resolve(channel, notification_type, language) is None
        ]

    async def _run_sequential(
        self,
        recipient_ids: Sequence[str],
        notification_type: str,
        data: Optional[Mapping[str, Any]],
        options: DispatchOptions,
    ) -> List[DispatchResult]:
        results: List[DispatchResult] = []
        for recipient_id in recipient_ids:
            result = await self._executor.dispatch(recipient_id, notification_type, data, options)
            results.append(result)
            if options.fail_fast and classify_outcome(result) == STATUS_FAILED:
                logger.warning(
                    "batch.fail_fast",
                    extra={"recipient_id": recipient_id, "remaining": len(recipient_ids) - len(results)},
                )
                break
        return results

    @staticmethod
    def _tally(results: Sequence[DispatchResult]) -> StatusCounts:
        counts = StatusCounts()
        for result in results:
            status = classify_outcome(result)
            setattr(counts, status, getattr(counts, status) + 1)
        return counts
