"""
Controller Listener Interface

Observer contract for presentation adapters and test probes that follow a
single elevator controller. Callbacks are invoked synchronously, in the exact
order the controller makes its transitions.
"""

from abc import ABC, abstractmethod


class IControllerListener(ABC):
    """
    Receives the controller's outbound events

    Register with ElevatorController.add_listener(). Callbacks must not raise:
    an exception propagates into the transition being announced.
    """

    @abstractmethod
    def on_state_changed(self, new_state: str):
        """
        Called on every state transition

        Args:
            new_state: State value ("IDLE", "MOVING_UP", "MOVING_DOWN", "DOOR_OPEN")
        """
        pass

    @abstractmethod
    def on_floor_changed(self, floor: int, travel_duration_ms: float):
        """
        Called when motion starts and again on arrival

        Args:
            floor: Target floor of the motion
            travel_duration_ms: Travel time when motion starts, 0 on arrival.
                Enough for an adapter to animate the car over the trip.
        """
        pass

    @abstractmethod
    def on_doors_changed(self, is_open: bool):
        """
        Called when the doors open and when they start closing
        """
        pass

    @abstractmethod
    def on_log(self, message: str):
        """
        Called with the human-readable trace of every transition
        """
        pass
