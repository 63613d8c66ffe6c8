# mlshelf/domain/session.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, Optional

from loguru import logger


class SessionState(str, Enum):
    loading = "loading"
    authenticated = "authenticated"
    anonymous = "anonymous"


INITIAL_SESSION = "INITIAL_SESSION"


@dataclass(frozen=True)
class SessionEvent:
    kind: str
    state: SessionState
    session: Any = None


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str = ""


Listener = Callable[[SessionEvent], None]


class SessionSubscription:
    def __init__(self, events: "SessionEvents", listener_id: int):
        self._events = events
        self._listener_id = listener_id

    def unsubscribe(self) -> None:
        self._events._listeners.pop(self._listener_id, None)


class SessionEvents:
    """Session-change event stream.

    Listeners are called in subscription order. An event published from inside
    a listener is queued and delivered once the current event has reached every
    listener, so all listeners observe the same sequence.
    """

    def __init__(self) -> None:
        self._listeners: Dict[int, Listener] = {}
        self._next_id = 0
        self._pending: Deque[SessionEvent] = deque()
        self._dispatching = False

    def subscribe(self, listener: Listener) -> SessionSubscription:
        listener_id = self._next_id
        self._next_id += 1
        self._listeners[listener_id] = listener
        return SessionSubscription(self, listener_id)

    def publish(self, event: SessionEvent) -> None:
        self._pending.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for listener in list(self._listeners.values()):
                    listener(current)
        finally:
            self._dispatching = False

    def close(self) -> None:
        self._listeners.clear()
        self._pending.clear()


class SessionContext:
    """Identity of one browser or API session.

    Owns the backend's session-change subscription from `start()` until
    `close()`; use it as a context manager to guarantee the teardown.
    """

    def __init__(self, client: Any, events: Optional[SessionEvents] = None):
        self.client = client
        self.events = events or SessionEvents()
        self.state = SessionState.loading
        self.session: Any = None
        self._subscription: Any = None
        self._started = False

    @property
    def user(self) -> Any:
        return getattr(self.session, "user", None)

    @property
    def user_id(self) -> Optional[str]:
        user = self.user
        return str(user.id) if user is not None else None

    @property
    def email(self) -> Optional[str]:
        return getattr(self.user, "email", None)

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.authenticated

    def start(self, tokens: Optional[SessionTokens] = None) -> "SessionContext":
        if self._started:
            return self
        self._started = True
        self._subscription = self.client.auth.on_auth_state_change(self._on_auth_change)

        if tokens and tokens.access_token:
            try:
                self.client.auth.set_session(tokens.access_token, tokens.refresh_token)
            except Exception as exc:
                logger.warning("Could not restore session: {}", exc)

        try:
            session = self.client.auth.get_session()
        except Exception as exc:
            logger.error("Error getting session: {}", exc)
            session = None
        self._apply(INITIAL_SESSION, session)
        return self

    def _on_auth_change(self, event: Any, session: Any) -> None:
        self._apply(str(getattr(event, "value", event)), session)

    def _apply(self, kind: str, session: Any) -> None:
        self.session = session
        self.state = SessionState.authenticated if session else SessionState.anonymous
        self.events.publish(SessionEvent(kind=kind, state=self.state, session=session))

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.events.close()

    def __enter__(self) -> "SessionContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
