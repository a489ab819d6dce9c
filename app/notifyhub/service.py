from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, Mapping, Optional, Sequence

from .batch import BatchOrchestrator
from .channels import ChannelSender, build_senders
from .config import NotifyHubConfig
from .data.db import initialize_database
from .dispatcher import DispatchExecutor
from .models import BatchResult, DispatchOptions, DispatchResult
from .planner import ChannelPlanner
from .preferences import InMemoryPreferenceStore, PreferenceProvider, SqlPreferenceStore
from .templates import TemplateRenderer, TemplateResolver, TemplateStore
from .tracker import NotificationTracker

logger = logging.getLogger("notifyhub.service")


class NotificationService:
    """Wires the template, planning and dispatch layers from configuration."""

    def __init__(
        self,
        config: NotifyHubConfig,
        *,
        preferences: Optional[PreferenceProvider] = None,
        senders: Optional[Mapping[str, ChannelSender]] = None,
        templates: Optional[TemplateStore] = None,
    ) -> None:
        self._config = config
        self.templates = templates or self._build_template_store(config)
        self.resolver = TemplateResolver(
            self.templates,
            default_language=config.templates.default_language,
            strict=config.templates.strict_language,
        )
        self.renderer = TemplateRenderer(config.defaults, remove_unresolved=config.templates.remove_unresolved)
        self.preferences = preferences or self._build_preference_store(config)
        self._senders: Dict[str, ChannelSender] = dict(senders) if senders is not None else build_senders(config)
        tracker = None
        if config.tracking.enabled:
            tracker = NotificationTracker(
                config.tracking.path,
                max_entries=config.tracking.max_entries,
                message_limit=config.tracking.message_limit,
            )
        self.planner = ChannelPlanner(
            self.resolver,
            default_factory=getattr(self.preferences, "create_default", None),
        )
        self.executor = DispatchExecutor(
            self.preferences,
            self.resolver,
            self.renderer,
            self._senders,
            planner=self.planner,
            tracker=tracker,
        )
        self.orchestrator = BatchOrchestrator(self.executor, self.resolver)

    @staticmethod
    def _build_template_store(config: NotifyHubConfig) -> TemplateStore:
        templates_conf = config.templates
        if templates_conf.path is not None:
            return TemplateStore.from_yaml(templates_conf.path, include_builtin=templates_conf.include_builtin)
        if templates_conf.include_builtin:
            return TemplateStore.with_builtin_catalog()
        return TemplateStore()

    @staticmethod
    def _build_preference_store(config: NotifyHubConfig) -> PreferenceProvider:
        if config.database is None:
            logger.warning("No database configured; preferences are kept in memory only")
            return InMemoryPreferenceStore()
        return SqlPreferenceStore(initialize_database(config.database))

    def resolve_options(self, overrides: Optional[Mapping[str, Any]] = None) -> DispatchOptions:
        """Merge per-call overrides onto the configured dispatch defaults."""
        if not overrides:
            return self._config.dispatch
        return DispatchOptions.from_dict({**asdict(self._config.dispatch), **overrides})

    async def send_notification_by_preference(
        self,
        recipient_id: str,
        notification_type: str,
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> DispatchResult:
        return await self.executor.dispatch(recipient_id, notification_type, data, self.resolve_options(options))

    async def send_batch(
        self,
        recipient_ids: Sequence[str],
        notification_type: str,
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> BatchResult:
        return await self.orchestrator.dispatch_batch(
            recipient_ids, notification_type, data, self.resolve_options(options)
        )

    async def aclose(self) -> None:
        for sender in self._senders.values():
            close_fn = getattr(sender, "aclose", None)
            if callable(close_fn):
                await close_fn()
