from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")

DEFAULT_FIELD_VALUES: Dict[str, Any] = {
    "userName": "Guest",
    "userFirstName": "User",
    "userLastName": "",
    "userEmail": "",
    "serviceName": "Our Service",
    "companyName": "Our Company",
    "supportEmail": "support@example.com",
    "supportPhone": "",
    "greeting": "Hello",
    "signature": "The Team",
    "expiryTime": "24",
    "appointmentTime": "the scheduled time",
    "appointmentDate": "the scheduled date",
    "verificationLink": "#verification-link#",
    "resetLink": "#reset-link#",
    "unsubscribeLink": "#unsubscribe-link#",
    "otpCode": "******",
    "amount": "0.00",
    "referenceNumber": "N/A",
}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class TemplateRenderer:
    """Substitutes ``{{name}}`` placeholders from request data, then defaults."""

    def __init__(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        *,
        remove_unresolved: bool = False,
    ) -> None:
        self._defaults: Dict[str, Any] = {**DEFAULT_FIELD_VALUES, **(defaults or {})}
        self.remove_unresolved = remove_unresolved

    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def set_defaults(self, values: Mapping[str, Any], *, merge: bool = True) -> Dict[str, Any]:
        if not isinstance(values, Mapping):
            raise TypeError("Default values must be a mapping")
        if merge:
            self._defaults.update(values)
        else:
            self._defaults = dict(values)
        return self.defaults()

    def render(self, template: Any, data: Optional[Mapping[str, Any]] = None) -> Any:
        values = data or {}
        if isinstance(template, str):
            return self._render_string(template, values)
        if isinstance(template, Mapping):
            return {
                key: self._render_string(value, values) if isinstance(value, str) else value
                for key, value in template.items()
            }
        raise TypeError(f"Cannot render template of type {type(template).__name__}")

    def _render_string(self, text: str, data: Mapping[str, Any]) -> str:
        def substitute(match: re.Match) -> str:
            key = match.group(1).strip()
            value = data.get(key)
            if value is None:
                value = self._defaults.get(key)
            if value is None:
                return "" if self.remove_unresolved else match.group(0)
            return _stringify(value)

        return PLACEHOLDER_PATTERN.sub(substitute, text)
