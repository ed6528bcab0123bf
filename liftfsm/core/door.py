import simpy

from .entity import Entity
from .states import DoorState


class Door(Entity):
    """
    Car door driven by the elevator controller.

    The door holds no timers of its own: the controller owns the single phase
    timer and calls open(), start_closing() and finish_closing() when each
    phase begins. The door publishes its events for observers.
    """
    def __init__(self, env: simpy.Environment, name: str, open_time: float = 3000.0,
                 close_time: float = 500.0, broker=None, elevator_name: str = None):
        super().__init__(env, name)
        self.open_time = open_time    # how long the doors stay open (ms)
        self.close_time = close_time  # closing duration (ms)
        self.broker = broker
        self.elevator_name = elevator_name
        self._current_floor = None
        self.set_state(DoorState.CLOSED)

    @property
    def is_open(self) -> bool:
        return self.state != DoorState.CLOSED

    def _broadcast_door_event(self, event_type: str):
        """Publish a door event for observers (statistics, adapters)."""
        if not self.broker or not self.elevator_name:
            return
        self.broker.put(f"elevator/{self.elevator_name}/door_events", {
            "timestamp": self.env.now,
            "elevator_name": self.elevator_name,
            "door_id": self.name,
            "event_type": event_type,
            "floor": self._current_floor,
        })

    def _broadcast_doors_changed(self, is_open: bool):
        if not self.broker or not self.elevator_name:
            return
        self.broker.put(f"elevator/{self.elevator_name}/doors", {
            "timestamp": self.env.now,
            "open": is_open,
            "floor": self._current_floor,
        })

    def open(self, floor: int):
        """Doors open at floor. Signals doors-changed(open=True)."""
        self._current_floor = floor
        self.set_state(DoorState.OPEN)
        self._broadcast_door_event("DOOR_OPENED")
        self._broadcast_doors_changed(True)

    def start_closing(self):
        """Closing phase begins. Signals doors-changed(open=False)."""
        self.set_state(DoorState.CLOSING)
        self._broadcast_door_event("DOOR_CLOSING_START")
        self._broadcast_doors_changed(False)

    def finish_closing(self):
        self.set_state(DoorState.CLOSED)
        self._broadcast_door_event("DOOR_CLOSED")

    def force_close(self):
        """Drop straight to CLOSED (controller reset), signalling doors-changed if they were open."""
        previous = self.state
        if previous == DoorState.CLOSED:
            return
        self.set_state(DoorState.CLOSED)
        self._broadcast_door_event("DOOR_CLOSED")
        # CLOSING already announced open=False
        if previous == DoorState.OPEN:
            self._broadcast_doors_changed(False)
