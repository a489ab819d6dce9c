from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from ..models import DEFAULT_LANGUAGE, SUPPORTED_CHANNELS
from ..schemas import TemplateFile
from .catalog import BUILTIN_TEMPLATES

logger = logging.getLogger("notifyhub.templates")

TemplateTree = Dict[str, Dict[str, Dict[str, Any]]]


def _normalize_language(language: Optional[str]) -> str:
    return (language or DEFAULT_LANGUAGE).strip().lower()


def _valid_content(channel: str, content: Any) -> bool:
    if channel == "sms":
        return isinstance(content, str) and bool(content)
    if channel == "email":
        return (
            isinstance(content, Mapping)
            and isinstance(content.get("subject"), str)
            and isinstance(content.get("body"), str)
        )
    return False


class TemplateStore:
    """
    Holds raw templates keyed by channel, template name and language.

    Email variants are ``{"subject": ..., "body": ...}`` mappings, SMS
    variants are plain strings. Lookups never fall back across languages;
    that is the resolver's job.
    """

    def __init__(self, templates: Optional[Mapping[str, Mapping[str, Mapping[str, Any]]]] = None) -> None:
        self._templates: TemplateTree = {channel: {} for channel in SUPPORTED_CHANNELS}
        if templates:
            self.load(templates)

    @classmethod
    def with_builtin_catalog(cls) -> "TemplateStore":
        return cls(copy.deepcopy(BUILTIN_TEMPLATES))

    @classmethod
    def from_yaml(cls, path: Path, *, include_builtin: bool = False) -> "TemplateStore":
        store = cls.with_builtin_catalog() if include_builtin else cls()
        store.load_yaml(path)
        return store

    def load_yaml(self, path: Path) -> int:
        with open(path, "r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        parsed = TemplateFile.model_validate(raw)
        loaded = self.load(parsed.as_mapping())
        logger.info("templates.loaded", extra={"path": str(path), "count": loaded})
        return loaded

    def load(self, templates: Mapping[str, Mapping[str, Mapping[str, Any]]]) -> int:
        loaded = 0
        for channel, names in templates.items():
            for name, variants in names.items():
                for language, content in variants.items():
                    if self.add_template(channel, name, language, content):
                        loaded += 1
        return loaded

    def add_template(self, channel: str, name: str, language: str, content: Any) -> bool:
        if not channel or not name or not language or not content:
            logger.error("Template channel, name, language, and content are required")
            return False
        if not _valid_content(channel, content):
            logger.error(
                "Rejected template %s.%s.%s: unsupported content for channel", channel, name, language
            )
            return False
        stored = dict(content) if isinstance(content, Mapping) else content
        self._templates.setdefault(channel, {}).setdefault(name, {})[_normalize_language(language)] = stored
        return True

    def get(self, channel: str, name: str, language: str) -> Optional[Any]:
        return self._templates.get(channel, {}).get(name, {}).get(_normalize_language(language))

    def exists(self, channel: str, name: str, language: Optional[str] = None) -> bool:
        variants = self._templates.get(channel, {}).get(name)
        if not variants:
            return False
        if language:
            return _normalize_language(language) in variants
        return True

    def channels(self) -> List[str]:
        return list(self._templates.keys())

    def template_names(self, channel: str) -> List[str]:
        return list(self._templates.get(channel, {}).keys())

    def list_available(self, channel: Optional[str] = None) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        for template_channel in self._channels_to_scan(channel):
            for name, variants in self._templates[template_channel].items():
                languages = list(variants.keys())
                entries.append(
                    {
                        "channel": template_channel,
                        "name": name,
                        "available_languages": languages,
                        "default_language": DEFAULT_LANGUAGE if DEFAULT_LANGUAGE in languages else languages[0],
                    }
                )
        return entries

    def available_languages(self, channel: Optional[str] = None) -> List[str]:
        seen: Dict[str, None] = {}
        for template_channel in self._channels_to_scan(channel):
            for variants in self._templates[template_channel].values():
                for language in variants:
                    seen.setdefault(language, None)
        return list(seen)

    def is_language_supported(self, language: str, channel: Optional[str] = None) -> bool:
        if not language:
            return False
        return _normalize_language(language) in self.available_languages(channel)

    def templates_for_language(self, language: str, channel: Optional[str] = None) -> List[Dict[str, Any]]:
        normalized = _normalize_language(language)
        entries: List[Dict[str, Any]] = []
        for template_channel in self._channels_to_scan(channel):
            for name, variants in self._templates[template_channel].items():
                if normalized not in variants:
                    continue
                content = variants[normalized]
                entries.append(
                    {
                        "channel": template_channel,
                        "name": name,
                        "language": normalized,
                        "content_type": "object" if isinstance(content, Mapping) else "string",
                        "fields": list(content.keys()) if isinstance(content, Mapping) else ["content"],
                        "available_languages": list(variants.keys()),
                    }
                )
        return entries

    def language_coverage(
        self,
        languages: Optional[Sequence[str]] = None,
        channel: Optional[str] = None,
    ) -> Dict[str, Any]:
        target_languages = [_normalize_language(lang) for lang in languages] if languages else self.available_languages()
        keys: List[str] = []
        available: Dict[str, List[str]] = {}
        for template_channel in self._channels_to_scan(channel):
            for name, variants in self._templates[template_channel].items():
                key = f"{template_channel}.{name}"
                keys.append(key)
                available[key] = list(variants.keys())

        total = len(keys)
        stats: Dict[str, Dict[str, Any]] = {}
        for language in target_languages:
            present = [key for key in keys if language in available[key]]
            stats[language] = {
                "count": len(present),
                "percentage": (len(present) / total * 100) if total else 0.0,
                "templates": present,
                "missing_templates": [key for key in keys if key not in present],
            }

        denominator = len(target_languages) or 1
        coverage = sorted(
            (
                {
                    "template": key,
                    "languages": available[key],
                    "coverage_percent": len(available[key]) / denominator * 100,
                }
                for key in keys
            ),
            key=lambda entry: entry["coverage_percent"],
            reverse=True,
        )
        return {
            "total_templates": total,
            "languages": stats,
            "most_covered": coverage[:5],
            "least_covered": list(reversed(coverage[-5:])),
        }

    def missing_translations(
        self,
        target_language: str,
        reference_languages: Iterable[str] = (DEFAULT_LANGUAGE,),
    ) -> List[Dict[str, Any]]:
        target = _normalize_language(target_language)
        references = [_normalize_language(lang) for lang in reference_languages]
        missing: List[Dict[str, Any]] = []
        for template_channel, names in self._templates.items():
            for name, variants in names.items():
                reference = next((lang for lang in references if lang in variants), None)
                if reference is None or target in variants:
                    continue
                missing.append(
                    {
                        "channel": template_channel,
                        "name": name,
                        "available_languages": list(variants.keys()),
                        "reference_language": reference,
                    }
                )
        return missing

    def _channels_to_scan(self, channel: Optional[str]) -> List[str]:
        if channel:
            return [channel] if channel in self._templates else []
        return list(self._templates.keys())
