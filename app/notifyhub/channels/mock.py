from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Mapping

from .base import SendReceipt

logger = logging.getLogger("notifyhub.channels.mock")


class MockSender:
    """Development sender that simulates network latency and always succeeds."""

    def __init__(self, name: str, *, delay: float = 0.6) -> None:
        self.name = name
        self._delay = max(0.0, delay)

    async def send(self, address: str, content: Any, metadata: Mapping[str, Any]) -> SendReceipt:
        if self._delay:
            await asyncio.sleep(self._delay)
        message_id = f"mock-{self.name}-{uuid.uuid4().hex[:12]}"
        logger.info(
            "mock.sent",
            extra={"channel": self.name, "to": address, "message_id": message_id},
        )
        return SendReceipt(message_id=message_id, status="sent", details={"mock": True})


class MockEmailSender(MockSender):
    def __init__(self, *, delay: float = 0.6) -> None:
        super().__init__("email", delay=delay)


class MockSmsSender(MockSender):
    def __init__(self, *, delay: float = 0.6) -> None:
        super().__init__("sms", delay=delay)
