from enum import Enum


class ElevatorState(str, Enum):
    """The four controller states. Exactly one is active at any instant."""

    IDLE = "IDLE"
    MOVING_UP = "MOVING_UP"
    MOVING_DOWN = "MOVING_DOWN"
    DOOR_OPEN = "DOOR_OPEN"

    @property
    def direction(self) -> str:
        """Direction of travel implied by the state ("UP", "DOWN" or "NO_DIRECTION")."""
        if self is ElevatorState.MOVING_UP:
            return "UP"
        if self is ElevatorState.MOVING_DOWN:
            return "DOWN"
        return "NO_DIRECTION"

    @property
    def is_moving(self) -> bool:
        return self in (ElevatorState.MOVING_UP, ElevatorState.MOVING_DOWN)


class DoorState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    CLOSING = "CLOSING"
