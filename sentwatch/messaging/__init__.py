"""Messaging channels the relay can dispatch summaries through."""

from __future__ import annotations

from typing import Protocol

from sentwatch.messaging.session import (
    ChannelInfo,
    ChannelSession,
    InvalidTransitionError,
    MessagingDispatchError,
    MessagingNotReadyError,
    SessionState,
)


class MessagingChannel(Protocol):
    """Transport interface used by the relay pipeline and the API."""

    session: ChannelSession

    @property
    def is_ready(self) -> bool: ...

    @property
    def info(self) -> ChannelInfo | None: ...

    async def connect(self) -> SessionState: ...

    async def send(self, destination: str, text: str) -> None: ...

    async def close(self) -> None: ...


__all__ = [
    "ChannelInfo",
    "ChannelSession",
    "InvalidTransitionError",
    "MessagingChannel",
    "MessagingDispatchError",
    "MessagingNotReadyError",
    "SessionState",
]
