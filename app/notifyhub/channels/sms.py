from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

import httpx

from .base import ChannelSendError, SendReceipt

logger = logging.getLogger("notifyhub.channels.sms")

MAX_SMS_LENGTH = 1600
_E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


def format_phone_number(phone_number: str) -> str:
    """Strip formatting and add a leading '+' when a country code is present."""
    digits = re.sub(r"[^\d+]", "", phone_number or "")
    if not digits.startswith("+") and re.match(r"^[1-9]", digits):
        return f"+{digits}"
    return digits


def is_e164(phone_number: str) -> bool:
    return bool(_E164_PATTERN.match(phone_number or ""))


class TwilioSmsSender:
    name = "sms"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        *,
        base_url: str = "https://api.twilio.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._account_sid = account_sid
        self._from_number = from_number
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=(account_sid, auth_token),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, address: str, content: Any, metadata: Mapping[str, Any]) -> SendReceipt:
        to_number = format_phone_number(address)
        if not is_e164(to_number):
            raise ChannelSendError(
                f"Invalid phone number format: {address}. Use E.164 format (e.g., +12025551234)",
                code="INVALID_PHONE_NUMBER",
            )
        body = content.get("body") if isinstance(content, Mapping) else content
        if not body or not isinstance(body, str):
            raise ChannelSendError("SMS message is required and must be a string", code="INVALID_MESSAGE")
        if len(body) > MAX_SMS_LENGTH:
            raise ChannelSendError(
                f"SMS message too long: {len(body)} chars (max {MAX_SMS_LENGTH})",
                code="MESSAGE_TOO_LONG",
            )

        try:
            response = await self._client.post(
                f"/2010-04-01/Accounts/{self._account_sid}/Messages.json",
                data={"To": to_number, "From": self._from_number, "Body": body},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise ChannelSendError(
                f"Twilio responded with {status}: {exc.response.text[:120]}",
                code="PROVIDER_ERROR",
                retryable=status >= 500,
            ) from exc
        except httpx.HTTPError as exc:
            raise ChannelSendError(f"Twilio request failed: {exc}", code="NETWORK_ERROR", retryable=True) from exc

        payload = response.json()
        logger.info("sms.sent", extra={"to": to_number, "sid": payload.get("sid")})
        return SendReceipt(
            message_id=payload.get("sid"),
            status=str(payload.get("status") or "queued"),
            details={"to": to_number},
        )
