"""WhatsApp channel - WhatsApp Business Cloud API via httpx."""

from __future__ import annotations

import httpx

from sentwatch.config import (
    WHATSAPP_API_BASE_URL,
    WHATSAPP_API_TOKEN,
    WHATSAPP_MAX_TEXT_CHARS,
    WHATSAPP_PHONE_NUMBER_ID,
    WHATSAPP_TIMEOUT_SECONDS,
)
from sentwatch.messaging.session import (
    ChannelInfo,
    ChannelSession,
    MessagingDispatchError,
    MessagingNotReadyError,
    SessionState,
)
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, time_block
from sentwatch.utils.redaction import mask_phone

logger = get_logger(__name__)

_TRUNCATION_SUFFIX = "\n..."


class WhatsAppChannel:
    """Sends text messages from a WhatsApp Business phone number."""

    def __init__(
        self,
        api_token: str = "",
        phone_number_id: str = "",
        base_url: str = WHATSAPP_API_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_token = api_token or WHATSAPP_API_TOKEN
        self._phone_id = phone_number_id or WHATSAPP_PHONE_NUMBER_ID
        self._base_url = base_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.session = ChannelSession()

    @property
    def is_configured(self) -> bool:
        return bool(self._api_token and self._phone_id)

    @property
    def is_ready(self) -> bool:
        return self.session.can_dispatch

    @property
    def info(self) -> ChannelInfo | None:
        return self.session.info

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Authorization": f"Bearer {self._api_token}"},
                timeout=WHATSAPP_TIMEOUT_SECONDS,
                transport=self._transport,
            )
        return self._client

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    async def connect(self) -> SessionState:
        """Authenticate and fetch the business number's profile.

        Leaves the session UNAUTHENTICATED when no token/phone id is
        configured, READY on success, FAILED on any API error.
        """
        if self.session.state is not SessionState.UNAUTHENTICATED:
            self.session.reset()

        if not self.is_configured:
            logger.warning(
                "WhatsApp not configured (WHATSAPP_API_TOKEN / WHATSAPP_PHONE_NUMBER_ID); "
                "relay will not start"
            )
            return self.session.state

        self.session.authenticated()
        client = self._get_client()
        try:
            resp = await client.get(
                f"/{self._phone_id}",
                params={"fields": "verified_name,display_phone_number"},
            )
        except httpx.HTTPError as e:
            self.session.failed(f"profile request failed: {e}")
            return self.session.state

        if resp.status_code != 200:
            self.session.failed(f"profile request returned {resp.status_code}: {resp.text[:200]}")
            return self.session.state

        try:
            profile = resp.json()
        except ValueError:
            self.session.failed("profile response was not JSON")
            return self.session.state

        self.session.ready(
            ChannelInfo(
                name=profile.get("verified_name", ""),
                identifier=profile.get("display_phone_number", ""),
            )
        )
        return self.session.state

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------
    async def send(self, destination: str, text: str) -> None:
        """Send a text message to a digit-only phone number.

        Raises:
            MessagingNotReadyError: If the session is not READY
            MessagingDispatchError: If the API call fails or is rejected
        """
        if not self.session.can_dispatch:
            raise MessagingNotReadyError(
                f"WhatsApp session is {self.session.state.value}, not ready"
            )

        if len(text) > WHATSAPP_MAX_TEXT_CHARS:
            text = text[: WHATSAPP_MAX_TEXT_CHARS - len(_TRUNCATION_SUFFIX)] + _TRUNCATION_SUFFIX

        payload = {
            "messaging_product": "whatsapp",
            "to": destination,
            "type": "text",
            "text": {"body": text},
        }

        client = self._get_client()
        try:
            with time_block("whatsapp.send.latency", slow_after=WHATSAPP_TIMEOUT_SECONDS / 2):
                resp = await client.post(f"/{self._phone_id}/messages", json=payload)
        except httpx.HTTPError as e:
            counter("whatsapp.send_failed")
            raise MessagingDispatchError(
                f"WhatsApp send to {mask_phone(destination)} failed: {e}"
            ) from e

        if resp.status_code not in (200, 201):
            counter("whatsapp.send_failed")
            raise MessagingDispatchError(
                f"WhatsApp send to {mask_phone(destination)} failed: "
                f"{resp.status_code} {resp.text[:200]}"
            )
        counter("whatsapp.sent")

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
