from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..models import DEFAULT_LANGUAGE
from .store import TemplateStore

logger = logging.getLogger("notifyhub.templates.resolver")


@dataclass(frozen=True, slots=True)
class ResolvedTemplate:
    template: Any
    language: str
    requested_language: str
    fallback_used: bool


class TemplateResolver:
    """
    Picks the template variant for a channel and language.

    The lookup is a two-step chain: the preferred language, then the
    default language. No other language is ever substituted.
    """

    def __init__(
        self,
        store: TemplateStore,
        *,
        default_language: str = DEFAULT_LANGUAGE,
        strict: bool = False,
    ) -> None:
        self._store = store
        self._default_language = default_language.lower()
        self._strict = strict

    @property
    def store(self) -> TemplateStore:
        return self._store

    @property
    def default_language(self) -> str:
        return self._default_language

    def resolve(
        self,
        channel: str,
        name: str,
        preferred_language: Optional[str] = None,
        *,
        strict: Optional[bool] = None,
    ) -> Optional[ResolvedTemplate]:
        requested = (preferred_language or self._default_language).strip().lower()
        template = self._store.get(channel, name, requested)
        if template is not None:
            return ResolvedTemplate(template, requested, requested, False)

        strict_mode = self._strict if strict is None else strict
        if strict_mode or requested == self._default_language:
            return None

        template = self._store.get(channel, name, self._default_language)
        if template is None:
            return None
        logger.info(
            "Template '%s.%s' not available in '%s', falling back to '%s'",
            channel,
            name,
            requested,
            self._default_language,
        )
        return ResolvedTemplate(template, self._default_language, requested, True)

    def is_available(self, channel: str, name: str, preferred_language: Optional[str] = None) -> bool:
        return self.resolve(channel, name, preferred_language) is not None
