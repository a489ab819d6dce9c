from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Dict, Mapping, Optional

from .channels.base import ChannelSender, SendReceipt
from .models import CHANNEL_EMAIL, CHANNEL_SMS, ChannelResult, DispatchOptions, DispatchResult, UserPreference
from .planner import REASON_NO_CHANNELS, ChannelPlanner
from .preferences import PreferenceProvider
from .templates.renderer import TemplateRenderer
from .templates.resolver import TemplateResolver
from .tracker import NotificationTracker
from .validators import is_valid_address

logger = logging.getLogger("notifyhub.dispatch")

ERROR_TEMPLATE_NOT_FOUND = "Template not found"
REASON_USER_NOT_FOUND = "user not found"
ERROR_DATA_NOT_MAPPING = "Data must be a mapping"


class DispatchExecutor:
    """
    Routes one notification to one recipient across the planned channels.

    ``dispatch`` never raises: planning outcomes, invalid addresses, missing
    templates and sender failures all come back inside the result. Channels
    are sent one after another so each result stays attributable.
    """

    def __init__(
        self,
        preferences: PreferenceProvider,
        resolver: TemplateResolver,
        renderer: TemplateRenderer,
        senders: Mapping[str, ChannelSender],
        *,
        planner: Optional[ChannelPlanner] = None,
        tracker: Optional[NotificationTracker] = None,
    ) -> None:
        self._preferences = preferences
        self._resolver = resolver
        self._renderer = renderer
        self._senders = dict(senders)
        self._planner = planner or ChannelPlanner(resolver)
        self._tracker = tracker

    @property
    def planner(self) -> ChannelPlanner:
        return self._planner

    async def dispatch(
        self,
        recipient_id: str,
        notification_type: str,
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[DispatchOptions] = None,
    ) -> DispatchResult:
        options = options or DispatchOptions()
        result = DispatchResult(recipient_id=recipient_id, notification_type=notification_type)

        if not recipient_id or not isinstance(recipient_id, str):
            result.error = "Recipient ID is required"
            return result
        if not notification_type or not isinstance(notification_type, str):
            result.error = "Notification type is required"
            return result
        if data is not None and not isinstance(data, Mapping):
            result.error = ERROR_DATA_NOT_MAPPING
            return result

        try:
            preference = self._preferences.get_preferences(recipient_id)
        except Exception as exc:  # noqa: BLE001 - provider outages are reported per recipient
            result.error = f"Failed to load preferences: {exc}"
            logger.exception("dispatch.preferences_error", extra={"recipient_id": recipient_id})
            return result
        if preference is None:
            result.skipped_reason = REASON_USER_NOT_FOUND
            logger.info("dispatch.skipped", extra={"recipient_id": recipient_id, "reason": REASON_USER_NOT_FOUND})
            return result
        if preference.is_deleted:
            logger.info("dispatch.deleted_record_replaced", extra={"recipient_id": recipient_id})
            preference = self._planner.effective_preference(preference, recipient_id)

        plan = self._planner.plan(preference, notification_type, options)
        result.preferences_overridden = plan.preferences_overridden
        if plan.failed:
            result.error = plan.reason
            logger.warning(
                "dispatch.plan_failed",
                extra={"recipient_id": recipient_id, "type": notification_type, "diagnostics": plan.diagnostics},
            )
            return result
        if not plan.channels:
            result.skipped_reason = plan.reason or REASON_NO_CHANNELS
            logger.info(
                "User %s has not opted in to receive %s notifications on any channel",
                recipient_id,
                notification_type,
            )
            return result

        result.channels = list(plan.channels)
        render_data = self._build_render_data(preference, data)
        for channel in plan.channels:
            result.results[channel] = await self._send_channel(
                channel, recipient_id, preference, notification_type, render_data
            )

        successes = sum(1 for channel_result in result.results.values() if channel_result.success)
        result.success = successes > 0
        if options.wants_combined_check:
            result.combined_delivery = successes == len(plan.channels)
            result.partial_delivery = 0 < successes < len(plan.channels)

        logger.info(
            "dispatch.complete",
            extra={
                "recipient_id": recipient_id,
                "type": notification_type,
                "channels": result.channels,
                "success": result.success,
            },
        )
        return result

    async def _send_channel(
        self,
        channel: str,
        recipient_id: str,
        preference: UserPreference,
        notification_type: str,
        render_data: Mapping[str, Any],
    ) -> ChannelResult:
        requested = preference.language
        channel_result = ChannelResult(success=False, requested_language=requested, actual_language=requested)

        address = self._address_for(channel, recipient_id, preference)
        if not is_valid_address(channel, address):
            channel_result.error = f"Invalid {channel} format"
            await self._track(recipient_id, channel, address, "failed", None, notification_type)
            return channel_result

        resolved = self._resolver.resolve(channel, notification_type, requested)
        if resolved is None:
            channel_result.error = ERROR_TEMPLATE_NOT_FOUND
            logger.warning(
                "%s template not found for %s in %s language", channel, notification_type, requested
            )
            return channel_result
        channel_result.actual_language = resolved.language
        channel_result.language_fallback_used = resolved.fallback_used

        content = self._renderer.render(resolved.template, render_data)
        sender = self._senders.get(channel)
        if sender is None:
            channel_result.error = f"No sender configured for {channel}"
            return channel_result

        metadata = {
            "recipient_id": recipient_id,
            "notification_type": notification_type,
            "language": resolved.language,
            "fallback_used": resolved.fallback_used,
        }
        try:
            receipt = sender.send(address, content, metadata)
            if inspect.isawaitable(receipt):
                receipt = await receipt
        except Exception as exc:  # noqa: BLE001 - sender failures are reported, not raised
            channel_result.error = str(exc) or f"Failed to send {channel}"
            logger.error(
                "Error sending %s %s to %s: %s", notification_type, channel, address, channel_result.error
            )
            await self._track(recipient_id, channel, address, "failed", self._summary(content), notification_type)
            return channel_result

        if isinstance(receipt, SendReceipt) and receipt.status == "failed":
            channel_result.error = str(receipt.details.get("error") or f"Failed to send {channel}")
        else:
            channel_result.success = True
            channel_result.message_id = getattr(receipt, "message_id", None)
        await self._track(
            recipient_id,
            channel,
            address,
            "sent" if channel_result.success else "failed",
            self._summary(content),
            notification_type,
        )
        return channel_result

    @staticmethod
    def _build_render_data(preference: UserPreference, data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        user_fields: Dict[str, Any] = {}
        if preference.name:
            user_fields["userName"] = preference.name
            user_fields["name"] = preference.name
        if preference.email:
            user_fields["userEmail"] = preference.email
            user_fields["email"] = preference.email
        if preference.phone:
            user_fields["userPhone"] = preference.phone
            user_fields["phone"] = preference.phone
        return {**user_fields, **(data or {})}

    @staticmethod
    def _address_for(channel: str, recipient_id: str, preference: UserPreference) -> Optional[str]:
        if channel == CHANNEL_EMAIL:
            return preference.email or recipient_id
        if channel == CHANNEL_SMS:
            return preference.phone
        return None

    @staticmethod
    def _summary(content: Any) -> Optional[str]:
        if isinstance(content, Mapping):
            return content.get("subject") or content.get("body")
        return content if isinstance(content, str) else None

    async def _track(
        self,
        recipient_id: str,
        channel: str,
        address: Optional[str],
        status: str,
        message: Optional[str],
        notification_type: str,
    ) -> None:
        if self._tracker is None:
            return
        await asyncio.to_thread(
            self._tracker.track,
            user_id=recipient_id,
            channel=channel,
            recipient=address,
            status=status,
            message=message,
            metadata={"notification_type": notification_type},
        )
