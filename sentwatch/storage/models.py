"""
Domain models (Pydantic v2) for the relay.

Sensitive fields (subjects, addresses, bodies, secrets) are hashed in repr so
models can be logged without leaking content.
"""

from __future__ import annotations

import re
from hashlib import sha256
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


_DIGITS = re.compile(r"[0-9]+")


def _hash_value(value: str) -> str:
    digest = sha256(value.encode("utf-8")).hexdigest()
    return f"hash:{digest[:12]}"


class RedactedModel(BaseModel):
    """Base model that redacts sensitive fields in repr/dumps."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
    _redact_fields = {
        "subject",
        "recipients",
        "body",
        "email",
        "phone",
        "client_secret",
        "refresh_token",
    }

    def _redacted_dump(self) -> dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        for field in self._redact_fields:
            if field in data and isinstance(data[field], str) and data[field]:
                data[field] = _hash_value(data[field])
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._redacted_dump()})"


class RelayEvent(RedactedModel):
    """One newly observed sent message, pending relay.

    `recipients` is the raw To header: it may hold several addresses and
    display names. Never persisted.
    """

    message_id: str
    subject: str = ""
    recipients: str = ""
    body: str = ""

    @field_validator("message_id")
    @classmethod
    def _message_id_present(cls, value: str) -> str:
        if not value:
            raise ValueError("message_id must be non-empty")
        return value


class GmailCredentials(RedactedModel):
    """Gmail API OAuth client and refresh token.

    Serialized with camelCase keys (clientId, clientSecret, refreshToken).
    """

    client_id: str = Field(default="", alias="clientId")
    client_secret: str = Field(default="", alias="clientSecret")
    refresh_token: str = Field(default="", alias="refreshToken")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    def to_record(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class ContactEntry(RedactedModel):
    """Normalized directory entry: lowercase email -> digit-only phone."""

    email: str
    phone: str

    @field_validator("email")
    @classmethod
    def _email_normalized(cls, value: str) -> str:
        if not value or value != value.strip().lower():
            raise ValueError("email must be non-empty, trimmed and lowercase")
        return value

    @field_validator("phone")
    @classmethod
    def _phone_digits(cls, value: str) -> str:
        if not value or not _DIGITS.fullmatch(value):
            raise ValueError("phone must contain digits only")
        return value
