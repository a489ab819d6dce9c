from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Any, Mapping

from .base import ChannelSendError, SendReceipt

logger = logging.getLogger("notifyhub.channels.email")


class SmtpEmailSender:
    name = "email"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._from_address = from_address
        self._use_tls = use_tls
        self._timeout = timeout

    async def send(self, address: str, content: Any, metadata: Mapping[str, Any]) -> SendReceipt:
        if not isinstance(content, Mapping):
            raise ChannelSendError("Email content must provide a subject and body", code="INVALID_MESSAGE")
        message = self._build_message(address, content)
        await asyncio.to_thread(self._deliver, message)
        logger.info(
            "email.sent",
            extra={"to": address, "message_id": message["Message-ID"], "type": metadata.get("notification_type")},
        )
        return SendReceipt(message_id=message["Message-ID"], status="sent")

    def _build_message(self, address: str, content: Mapping[str, Any]) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._from_address
        message["To"] = address
        message["Subject"] = str(content.get("subject", ""))
        message["Message-ID"] = make_msgid()
        message.set_content(str(content.get("body", "")))
        html = content.get("html")
        if isinstance(html, str) and html:
            message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise ChannelSendError(f"SMTP delivery failed: {exc}", code="SMTP_ERROR", retryable=True) from exc
