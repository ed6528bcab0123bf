import itertools
from typing import Optional

import simpy


class Entity:
    """
    Base class for entities living in a SimPy environment.

    Provides a unique ID, a display name, a single current state and the
    trace-line convention shared by every component:
    "<sim time> [<name>] <message>".
    Concrete classes define their own state values and react to transitions
    by overriding _on_state_changed().
    """
    # Entity ID counter shared across all class instances
    _entity_id_counter = itertools.count()

    def __init__(self, env: simpy.Environment, name: Optional[str] = None):
        """
        Initialize the entity.

        Args:
            env: The SimPy environment this entity belongs to (also its clock).
            name: Entity name. If not specified, auto-generated from class name and ID.
        """
        self.env = env
        self.entity_id: int = next(self._entity_id_counter)
        self.name: str = name if name is not None else f"{self.__class__.__name__}_{self.entity_id}"

        # Concrete classes move out of this placeholder in their __init__
        self.state = "initial_state"

        self.trace(f'Entity "{self.name}" ({self.__class__.__name__}, ID:{self.entity_id}) created.')

    def set_state(self, new_state):
        """
        Transition the entity's state.

        Setting the current state again is not a transition and is ignored.

        Returns:
            True if the state changed.
        """
        if self.state == new_state:
            return False
        old_state = self.state
        self.state = new_state
        self._on_state_changed(old_state, new_state)
        return True

    def get_state(self):
        return self.state

    def _on_state_changed(self, old_state, new_state):
        """Hook called after every state change. Default: trace the transition."""
        self.trace(f"state transition: {_label(old_state)} -> {_label(new_state)}")

    def trace(self, message: str):
        print(f"{self.env.now:.2f} [{self.name}] {message}")


def _label(state) -> str:
    return getattr(state, "value", state)
