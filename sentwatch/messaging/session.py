"""
Messaging channel session lifecycle as an explicit state machine.

    UNAUTHENTICATED -> AWAITING_SCAN -> AUTHENTICATED -> READY
           |                 |               |            |
           +-----------------+---------------+------------+--> FAILED

Any state may `reset()` back to UNAUTHENTICATED. The relay only asks one
question of the session: `can_dispatch`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event

logger = get_logger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AWAITING_SCAN = "awaiting_scan"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    FAILED = "failed"


_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.UNAUTHENTICATED: frozenset(
        {SessionState.AWAITING_SCAN, SessionState.AUTHENTICATED, SessionState.FAILED}
    ),
    SessionState.AWAITING_SCAN: frozenset(
        {SessionState.AWAITING_SCAN, SessionState.AUTHENTICATED, SessionState.FAILED}
    ),
    SessionState.AUTHENTICATED: frozenset({SessionState.READY, SessionState.FAILED}),
    SessionState.READY: frozenset({SessionState.FAILED}),
    SessionState.FAILED: frozenset(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when a session event is not valid in the current state."""


class MessagingNotReadyError(RuntimeError):
    """Raised when a dispatch is attempted while the session is not READY."""


class MessagingDispatchError(RuntimeError):
    """Raised when the channel rejects or fails to deliver a message."""


@dataclass(frozen=True)
class ChannelInfo:
    """Identity of the connected account, shown on the status endpoint."""

    name: str
    identifier: str


class ChannelSession:
    """Tracks the connection state of one messaging channel."""

    def __init__(self) -> None:
        self._state = SessionState.UNAUTHENTICATED
        self._info: ChannelInfo | None = None
        self._scan_code: str | None = None
        self._failure_reason: str | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def info(self) -> ChannelInfo | None:
        return self._info

    @property
    def scan_code(self) -> str | None:
        """Pairing code to show the operator while AWAITING_SCAN."""
        return self._scan_code

    @property
    def failure_reason(self) -> str | None:
        return self._failure_reason

    @property
    def can_dispatch(self) -> bool:
        return self._state is SessionState.READY

    def _move(self, target: SessionState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise InvalidTransitionError(
                f"cannot move messaging session from {self._state.value} to {target.value}"
            )
        previous = self._state
        self._state = target
        counter(f"messaging.state.{target.value}")
        log_event("messaging.state_changed", previous=previous.value, state=target.value)

    def awaiting_scan(self, code: str) -> None:
        """A pairing code was issued; the operator must scan it."""
        self._move(SessionState.AWAITING_SCAN)
        self._scan_code = code
        logger.info("Messaging session awaiting scan of pairing code")

    def authenticated(self) -> None:
        self._move(SessionState.AUTHENTICATED)
        self._scan_code = None
        logger.info("Messaging session authenticated")

    def ready(self, info: ChannelInfo) -> None:
        self._move(SessionState.READY)
        self._info = info
        logger.info("Messaging session ready as %s", info.name)

    def failed(self, reason: str) -> None:
        self._move(SessionState.FAILED)
        self._failure_reason = reason
        self._info = None
        logger.error("Messaging session failed: %s", reason)

    def reset(self) -> None:
        previous = self._state
        self._state = SessionState.UNAUTHENTICATED
        self._info = None
        self._scan_code = None
        self._failure_reason = None
        log_event("messaging.state_changed", previous=previous.value, state=self._state.value)
