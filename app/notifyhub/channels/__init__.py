"""Channel senders and the factory that builds them from configuration."""

from __future__ import annotations

from typing import Dict

from ..config import NotifyHubConfig
from .base import ChannelSender, ChannelSendError, SendReceipt
from .email import SmtpEmailSender
from .mock import MockEmailSender, MockSender, MockSmsSender
from .sms import TwilioSmsSender


def build_senders(config: NotifyHubConfig) -> Dict[str, ChannelSender]:
    if not config.live:
        return {
            "email": MockEmailSender(delay=config.mock_delay),
            "sms": MockSmsSender(delay=config.mock_delay),
        }

    senders: Dict[str, ChannelSender] = {}
    if config.email is not None:
        email_conf = config.email
        senders["email"] = SmtpEmailSender(
            host=email_conf.smtp_host,
            port=email_conf.smtp_port,
            username=email_conf.username,
            password=email_conf.password,
            from_address=email_conf.from_address,
            use_tls=email_conf.use_tls,
            timeout=email_conf.timeout,
        )
    if config.sms is not None:
        sms_conf = config.sms
        senders["sms"] = TwilioSmsSender(
            account_sid=sms_conf.account_sid,
            auth_token=sms_conf.auth_token,
            from_number=sms_conf.from_number,
            base_url=sms_conf.base_url,
            timeout=sms_conf.timeout,
        )
    return senders


__all__ = [
    "ChannelSender",
    "ChannelSendError",
    "MockEmailSender",
    "MockSender",
    "MockSmsSender",
    "SendReceipt",
    "SmtpEmailSender",
    "TwilioSmsSender",
    "build_senders",
]
