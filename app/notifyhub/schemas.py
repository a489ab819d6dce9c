from __future__ import annotations

from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator


class PreferenceUpdate(BaseModel):
    """Administrative change to a stored preference record."""

    model_config = ConfigDict(extra="forbid")

    email_enabled: Optional[StrictBool] = None
    sms_enabled: Optional[StrictBool] = None
    preferred_language: Optional[str] = Field(default=None, min_length=2, max_length=16)
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def _require_change(self) -> "PreferenceUpdate":
        if not self.model_fields_set:
            raise ValueError("No preference fields provided")
        return self

    def changes(self) -> Dict[str, object]:
        values = self.model_dump(exclude_unset=True)
        if values.get("preferred_language"):
            values["preferred_language"] = str(values["preferred_language"]).lower()
        return values


class EmailTemplateContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    subject: str
    body: str


TemplateContent = Union[EmailTemplateContent, str]


class TemplateFile(BaseModel):
    """Shape of a YAML template file: channel -> name -> language -> content."""

    email: Dict[str, Dict[str, EmailTemplateContent]] = Field(default_factory=dict)
    sms: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    def as_mapping(self) -> Dict[str, Dict[str, Dict[str, object]]]:
        return {
            "email": {
                name: {language: content.model_dump() for language, content in variants.items()}
                for name, variants in self.email.items()
            },
            "sms": {name: dict(variants) for name, variants in self.sms.items()},
        }
