from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .models import CHANNEL_EMAIL, CHANNEL_SMS, SUPPORTED_CHANNELS, DispatchOptions, UserPreference
from .templates.resolver import TemplateResolver

REASON_NO_CHANNELS = "no channels enabled"
REASON_TEMPLATES_UNAVAILABLE = "templates not available for all required channels"


@dataclass(slots=True)
class ChannelPlan:
    channels: List[str] = field(default_factory=list)
    reason: Optional[str] = None
    failed: bool = False
    preferences_overridden: bool = False
    diagnostics: Dict[str, Any] = field(default_factory=dict)


class ChannelPlanner:
    """
    Decides which channels a notification goes out on for one user.

    Planning is a pure function of the preference record, the notification
    type, the options and the template catalog; it never sends anything.

    A missing or deleted record is replaced by ``default_factory(user_id)``.
    Without a factory that is a bare ``UserPreference`` with dataclass
    defaults, not the store's configured defaults.
    """

    def __init__(
        self,
        resolver: TemplateResolver,
        *,
        default_factory: Optional[Callable[[str], UserPreference]] = None,
    ) -> None:
        self._resolver = resolver
        self._default_factory = default_factory or (lambda user_id: UserPreference(user_id=user_id))

    def effective_preference(self, preference: Optional[UserPreference], user_id: str = "") -> UserPreference:
        if preference is None:
            return self._default_factory(user_id)
        if preference.is_deleted:
            return self._default_factory(user_id or preference.user_id)
        return preference

    def plan(
        self,
        preference: Optional[UserPreference],
        notification_type: str,
        options: Optional[DispatchOptions] = None,
    ) -> ChannelPlan:
        options = options or DispatchOptions()
        preference = self.effective_preference(preference)

        base = [channel for channel in SUPPORTED_CHANNELS if preference.channel_enabled(channel)]
        plan = ChannelPlan(diagnostics={"base_channels": list(base), "language": preference.language})

        if not base:
            if not options.force_send:
                plan.reason = REASON_NO_CHANNELS
                return plan
            base = [CHANNEL_EMAIL]
            if preference.phone:
                base.append(CHANNEL_SMS)
            plan.preferences_overridden = True
            plan.diagnostics["forced_channels"] = list(base)

        if options.wants_combined_check:
            missing = [
                channel
                for channel in base
                if not self._resolver.is_available(channel, notification_type, preference.language)
            ]
            plan.diagnostics["missing_templates"] = missing
            if missing and options.require_all_channels:
                plan.failed = True
                plan.reason = REASON_TEMPLATES_UNAVAILABLE
                return plan
            base = [channel for channel in base if channel not in missing]
            if not base:
                plan.reason = REASON_TEMPLATES_UNAVAILABLE
                plan.failed = True
                return plan

        plan.channels = base
        return plan
