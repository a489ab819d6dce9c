from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Mapping, Optional, Protocol, Union


class ChannelSendError(RuntimeError):
    """Raised when a channel provider rejects or fails to deliver a message."""

    def __init__(self, message: str, *, code: str = "SEND_FAILED", retryable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.retryable = retryable


@dataclass(slots=True)
class SendReceipt:
    message_id: Optional[str]
    status: str = "sent"
    details: Dict[str, Any] = field(default_factory=dict)


class ChannelSender(Protocol):
    name: str

    def send(
        self,
        address: str,
        content: Any,
        metadata: Mapping[str, Any],
    ) -> Union[SendReceipt, Awaitable[SendReceipt]]:
        ...
