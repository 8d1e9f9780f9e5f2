"""Entity store.

Holds the current :class:`DashboardState` and is the only place where it
changes. All changes go through :meth:`EntityStore.dispatch`, which runs
the pure reducer and notifies listeners when the state actually changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from pyhadash.models.entity import Entity
from pyhadash.state.actions import Action, ConnectionStatus, SetConnectionStatus, SetEntities, UpdateEntity
from pyhadash.state.reducer import DashboardState, reduce

_logger = logging.getLogger(__name__)

StateListener = Callable[[DashboardState, Action], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EntityStore:
    """In-memory store for the dashboard state.

    Given the same sequence of actions the store always ends in the same
    state; timers, network calls and persistence live outside of it.
    """

    def __init__(self, state: DashboardState | None = None) -> None:
        self._state = state if state is not None else DashboardState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def connection_status(self) -> ConnectionStatus:
        return self._state.connection_status

    def dispatch(self, action: Action) -> DashboardState:
        """Apply *action* and return the resulting state."""
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is not previous:
            for listener in tuple(self._listeners):
                try:
                    listener(self._state, action)
                except Exception:
                    _logger.exception("State listener failed for %s", type(action).__name__)
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def get_entity(self, entity_id: str) -> Entity | None:
        return self._state.get_entity(entity_id)

    def update_entity(self, entity: Entity) -> None:
        """Replace one entity by id.

        Used for optimistic patches. The caller keeps the previous value and
        calls this again with it to revert when the remote call fails.
        """
        self.dispatch(UpdateEntity(entity=entity, received_at=_utcnow()))

    def set_entities(self, entities: Iterable[Entity]) -> None:
        """Replace the entity snapshot, stamped with the time it was received."""
        self.dispatch(SetEntities(entities=tuple(entities), received_at=_utcnow()))

    def set_connection_status(self, status: ConnectionStatus, error: str | None = None) -> None:
        self.dispatch(SetConnectionStatus(status=status, error=error))
