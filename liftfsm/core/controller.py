from typing import Callable, Iterable, Optional

import simpy

from ..config.controller import TimingConfig
from ..infrastructure.message_broker import MessageBroker
from ..interfaces.controller_listener import IControllerListener
from .door import Door
from .entity import Entity
from .request_queue import RequestQueue
from .states import ElevatorState


class ElevatorController(Entity):
    """
    Single-car elevator controller.

    Floor requests are serialized into one travel plan and served through timed
    phases: motion, doors open, doors closing, idle. Every request and every
    timer firing runs on the SimPy environment, one at a time, so the state,
    the current floor and the request queue are only touched from that single
    point.

    Transition table:
        IDLE        --request queued-->       MOVING_UP / MOVING_DOWN / DOOR_OPEN
        MOVING_*    --arrival timer-->        DOOR_OPEN (current_floor updated)
        DOOR_OPEN   --door-open timer-->      DOOR_OPEN, door CLOSING
        DOOR_OPEN   --door-close timer-->     IDLE, then dispatch next request

    Observers follow the controller through broker topics under
    "elevator/<name>/" (state, floor, doors, log, request_queued,
    request_rejected, arrived, status, door_events) or through an
    IControllerListener registered with add_listener().

    Subscribers run inside the transition that emits to them and must not
    raise: an exception propagates out of the phase that published it (and
    out of env.run() when a timer was firing), leaving the controller to be
    recovered with reset().
    """

    def __init__(self, env: simpy.Environment, name: str, broker: MessageBroker,
                 timing: Optional[TimingConfig] = None, initial_floor: int = 0,
                 service_floors: Optional[Iterable[int]] = None):
        self.broker = broker
        self.timing = timing if timing is not None else TimingConfig()
        self.current_floor = initial_floor
        self.target_floor = None
        self.request_queue = RequestQueue()
        # None = every floor accepted
        self.service_floors = sorted(set(service_floors)) if service_floors is not None else None

        # Single outstanding phase timer (SimPy process); superseded timers are ignored
        self._timer = None
        # Set while a return to IDLE is being announced; requests made by
        # subscribers meanwhile are queued and dispatched once it completes
        self._holding_dispatch = False

        self.topic_prefix = f"elevator/{name}"
        super().__init__(env, name)

        self.door = Door(env, f"{name}_Door", open_time=self.timing.door_open_ms,
                         close_time=self.timing.door_close_ms, broker=broker, elevator_name=name)

        self.set_state(ElevatorState.IDLE)
        self._log(f"Elevator is idle at floor {self.current_floor}.")

    # --- Outbound events ---

    def _topic(self, suffix: str) -> str:
        return f"{self.topic_prefix}/{suffix}"

    def _publish(self, suffix: str, message: dict):
        message = {"timestamp": self.env.now, "elevator_name": self.name, **message}
        self.broker.put(self._topic(suffix), message)

    def _log(self, message: str):
        self.trace(message)
        self._publish("log", {"message": message})

    def _on_state_changed(self, old_state, new_state):
        super()._on_state_changed(old_state, new_state)
        # The Entity placeholder is not a controller state
        previous = old_state.value if isinstance(old_state, ElevatorState) else None
        self._publish("state", {"state": new_state.value, "previous_state": previous})
        self._report_status()

    def _report_status(self):
        self.broker.put(self._topic("status"), self.status())

    def status(self) -> dict:
        """Snapshot of the controller for observers and tests."""
        return {
            "timestamp": self.env.now,
            "elevator_name": self.name,
            "current_floor": self.current_floor,
            "target_floor": self.target_floor,
            "state": self.state.value,
            "direction": self.direction,
            "door_state": self.door.state.value,
            "request_queue": self.request_queue.as_list(),
        }

    def add_listener(self, listener: IControllerListener):
        """
        Route this controller's events to listener, synchronously and in order.
        """
        self.broker.subscribe(self._topic("state"),
                              lambda m: listener.on_state_changed(m["state"]))
        self.broker.subscribe(self._topic("floor"),
                              lambda m: listener.on_floor_changed(m["floor"], m["travel_duration_ms"]))
        self.broker.subscribe(self._topic("doors"),
                              lambda m: listener.on_doors_changed(m["open"]))
        self.broker.subscribe(self._topic("log"),
                              lambda m: listener.on_log(m["message"]))

    @property
    def direction(self) -> str:
        return self.state.direction

    # --- Inbound ---

    def can_serve_floor(self, floor: int) -> bool:
        if self.service_floors is None:
            return True
        return floor in self.service_floors

    def request_floor(self, floor: int) -> bool:
        """
        Queue a floor request. Never blocks, and raises nothing of its own.

        A floor already in the queue is a no-op. While the car is moving, the
        queue is reordered to serve floors ahead of it before reversing;
        otherwise it is kept ascending. If the controller is idle the next
        request is dispatched before returning. A subscriber calling in while
        the controller is announcing its return to IDLE gets its request queued
        and dispatched right after the idle announcement.

        Returns:
            True if the floor was queued, False if it was already pending or
            rejected as outside the service floors.
        """
        if not self.can_serve_floor(floor):
            self._log(f"Request for floor {floor} rejected: not a service floor.")
            self._publish("request_rejected", {"floor": floor, "reason": "INVALID_FLOOR"})
            return False

        if not self.request_queue.add(floor, self.current_floor, self.direction):
            return False

        self._log(f"Request for floor {floor} added to queue.")
        self._publish("request_queued", {"floor": floor, "request_queue": self.request_queue.as_list()})

        if self.state == ElevatorState.IDLE and not self._holding_dispatch:
            self._dispatch_next()
        return True

    def reset(self):
        """
        Recover after a lost cycle: back to IDLE at the last settled floor.

        The outstanding timer is invalidated, pending requests are dropped and
        the door is closed. A motion in flight is abandoned, so current_floor
        stays at its departure floor.
        """
        # The pending timer, if any, is superseded and will be ignored when it fires
        self._timer = None
        self.target_floor = None
        dropped = self.request_queue.as_list()
        self.request_queue.clear()
        self.door.force_close()
        self._enter_idle(f"Controller reset at floor {self.current_floor}. Dropped requests: {dropped}.")
        self._dispatch_next()

    # --- Dispatch and timed phases ---

    def _dispatch_next(self):
        """Leave IDLE toward the head of the queue, if any."""
        if self.state != ElevatorState.IDLE:
            return
        target = self.request_queue.pop_next()
        if target is None:
            return

        if target == self.current_floor:
            self._log(f"Already at floor {target}. Opening doors.")
            self._open_doors()
        else:
            self._start_motion(target)

    def _start_motion(self, target: int):
        going_up = target > self.current_floor
        self.target_floor = target
        self.set_state(ElevatorState.MOVING_UP if going_up else ElevatorState.MOVING_DOWN)
        self._log(f"Moving {'UP' if going_up else 'DOWN'} to floor {target}...")

        travel_time = abs(target - self.current_floor) * self.timing.time_per_floor_ms
        self._publish("floor", {"floor": target, "travel_duration_ms": travel_time,
                                "from_floor": self.current_floor})
        self._schedule(travel_time, self._on_arrival)

    def _on_arrival(self):
        self.current_floor = self.target_floor
        self.target_floor = None
        self._log(f"Arrived at floor {self.current_floor}.")
        self._publish("arrived", {"floor": self.current_floor})
        self._publish("floor", {"floor": self.current_floor, "travel_duration_ms": 0})
        self._open_doors()

    def _open_doors(self):
        self.set_state(ElevatorState.DOOR_OPEN)
        self._log("Doors are opening.")
        self.door.open(self.current_floor)
        self._schedule(self.door.open_time, self._close_doors)

    def _close_doors(self):
        self._log("Doors are closing.")
        self.door.start_closing()
        self._report_status()
        self._schedule(self.door.close_time, self._on_doors_closed)

    def _on_doors_closed(self):
        self.door.finish_closing()
        self._enter_idle("Elevator is idle. Waiting for requests.")
        self._dispatch_next()

    def _enter_idle(self, message: str):
        """Announce IDLE and its log line before any re-entrant request is dispatched."""
        self._holding_dispatch = True
        try:
            self.set_state(ElevatorState.IDLE)
            self._log(message)
        finally:
            self._holding_dispatch = False

    def _schedule(self, delay: float, action: Callable[[], None]):
        """Start the phase timer; action runs when it fires unless superseded."""
        self._timer = self.env.process(self._phase_timer(delay, action))

    def _phase_timer(self, delay, action):
        yield self.env.timeout(delay)
        if self._timer is not self.env.active_process:
            return
        self._timer = None
        action()
