"""Pydantic request/response models for the SentWatch control API.

Wire names are camelCase (clientId, messagingConnected, ...) to match the
stored records and the existing web client; Python attributes are snake_case.
Request fields are all optional at the schema level so that a missing field
produces the API's own 400 response instead of a 422 validation error.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# REQUESTS
# =============================================================================


class CredentialsRequest(ApiModel):
    client_id: str | None = Field(default=None, alias="clientId", max_length=512)
    client_secret: str | None = Field(default=None, alias="clientSecret", max_length=512)
    refresh_token: str | None = Field(default=None, alias="refreshToken", max_length=2048)

    def missing_fields(self) -> list[str]:
        return [
            alias
            for alias, value in (
                ("clientId", self.client_id),
                ("clientSecret", self.client_secret),
                ("refreshToken", self.refresh_token),
            )
            if not value
        ]


class ContactRequest(ApiModel):
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=64)


# =============================================================================
# RESPONSES
# =============================================================================


class HealthResponse(ApiModel):
    status: str
    messaging_connected: bool = Field(serialization_alias="messagingConnected")
    processed_count: int = Field(serialization_alias="processedCount")


class ChannelInfoResponse(ApiModel):
    name: str
    identifier: str


class MessagingStatusResponse(ApiModel):
    connected: bool
    info: ChannelInfoResponse | None = None


class CredentialsStatusResponse(ApiModel):
    configured: bool


class OperationResponse(ApiModel):
    success: bool
    error: str | None = None


class ContactsResponse(ApiModel):
    success: bool
    contacts: dict[str, str] | None = None
    error: str | None = None
