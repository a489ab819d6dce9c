from __future__ import annotations

from notifyhub.templates import TemplateResolver, TemplateStore


def _resolver(**kwargs) -> TemplateResolver:
    store = TemplateStore(
        {
            "email": {
                "welcome": {"en": {"subject": "Welcome", "body": "Hello"}},
                "otp": {
                    "en": {"subject": "Code", "body": "{{otpCode}}"},
                    "es": {"subject": "Código", "body": "{{otpCode}}"},
                },
                "legacy": {"fr": {"subject": "Ancien", "body": "Seulement en français"}},
            },
            "sms": {"otp": {"es": "Código {{otpCode}}"}},
        }
    )
    return TemplateResolver(store, **kwargs)


def test_exact_match_has_no_fallback():
    resolved = _resolver().resolve("email", "otp", "es")

    assert resolved.language == "es"
    assert resolved.requested_language == "es"
    assert resolved.fallback_used is False


def test_english_request_never_reports_fallback():
    resolved = _resolver().resolve("email", "welcome", "en")

    assert resolved.language == "en"
    assert resolved.fallback_used is False


def test_non_english_request_falls_back_to_english():
    for language in ("fr", "de", "pt-br", "ES"):
        resolved = _resolver().resolve("email", "welcome", language)
        assert resolved.language == "en"
        assert resolved.fallback_used is True
        assert resolved.requested_language == language.lower()


def test_no_arbitrary_language_substitution():
    resolver = _resolver()

    assert resolver.resolve("email", "legacy", "de") is None
    assert resolver.resolve("email", "legacy", "en") is None
    assert resolver.resolve("sms", "otp", "fr") is None


def test_strict_mode_disables_fallback():
    assert _resolver(strict=True).resolve("email", "welcome", "fr") is None
    assert _resolver().resolve("email", "welcome", "fr", strict=True) is None
    assert _resolver(strict=True).resolve("email", "welcome", "en") is not None


def test_missing_language_defaults_to_english():
    resolved = _resolver().resolve("email", "welcome", None)

    assert resolved.language == "en"
    assert resolved.fallback_used is False


def test_is_available_is_fallback_aware():
    resolver = _resolver()

    assert resolver.is_available("email", "welcome", "fr")
    assert not resolver.is_available("sms", "welcome", "en")
