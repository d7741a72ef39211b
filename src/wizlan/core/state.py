"""Connection state shared by every device using one socket."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    IDLE = "idle"
    BINDING = "binding"
    READY = "ready"
    AWAITING_RESPONSE = "awaiting_response"
    CLOSED = "closed"


StateListener = Callable[[ConnectionState], None]

TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.IDLE: frozenset({ConnectionState.BINDING, ConnectionState.CLOSED}),
    ConnectionState.BINDING: frozenset({ConnectionState.READY, ConnectionState.CLOSED}),
    ConnectionState.READY: frozenset(
        {ConnectionState.AWAITING_RESPONSE, ConnectionState.CLOSED}
    ),
    ConnectionState.AWAITING_RESPONSE: frozenset(
        {ConnectionState.READY, ConnectionState.CLOSED}
    ),
    ConnectionState.CLOSED: frozenset(),
}


class InvalidTransition(RuntimeError):
    def __init__(self, current: ConnectionState, target: ConnectionState):
        self.current = current
        self.target = target
        super().__init__(f"Invalid transition {current.name} -> {target.name}")


class ConnectionStateMachine:
    """Finite state machine with an explicit transition table.

    Listeners are called with the new state after every transition. The
    full sequence of states is kept in ``history``.
    """

    def __init__(self) -> None:
        self._state = ConnectionState.IDLE
        self._listeners: list[StateListener] = []
        self.history: list[ConnectionState] = [ConnectionState.IDLE]

    @property
    def current(self) -> ConnectionState:
        return self._state

    def can_transition(self, target: ConnectionState) -> bool:
        return target in TRANSITIONS[self._state]

    def transition(self, target: ConnectionState) -> None:
        if not self.can_transition(target):
            raise InvalidTransition(self._state, target)

        logger.debug("Connection state %s -> %s", self._state.name, target.name)
        self._state = target
        self.history.append(target)

        for listener in list(self._listeners):
            try:
                listener(target)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear_listeners(self) -> None:
        self._listeners.clear()
