"""State/store layer.

The entity store is the single source of truth for the entity snapshot,
connection status, registry lookups and user customizations. Every
change is an action applied by a pure reducer.
"""

from pyhadash.state.actions import Action, ConnectionStatus
from pyhadash.state.reducer import DashboardState, reduce
from pyhadash.state.store import EntityStore

__all__ = ["Action", "ConnectionStatus", "DashboardState", "EntityStore", "reduce"]
