import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
import simpy

from liftfsm.config import TimingConfig
from liftfsm.core.controller import ElevatorController
from liftfsm.infrastructure.message_broker import MessageBroker
from liftfsm.interfaces.controller_listener import IControllerListener


class RecordingListener(IControllerListener):
    """Keeps every controller event as (sim time, kind, payload)"""

    def __init__(self, env):
        self.env = env
        self.events = []

    def on_state_changed(self, new_state):
        self.events.append((self.env.now, "state", new_state))

    def on_floor_changed(self, floor, travel_duration_ms):
        self.events.append((self.env.now, "floor", (floor, travel_duration_ms)))

    def on_doors_changed(self, is_open):
        self.events.append((self.env.now, "doors", is_open))

    def on_log(self, message):
        self.events.append((self.env.now, "log", message))

    def of_kind(self, kind):
        return [(t, payload) for t, k, payload in self.events if k == kind]

    def states(self):
        return [payload for _, payload in self.of_kind("state")]

    def motion_targets(self):
        """Targets of motions started, in order"""
        return [floor for _, (floor, travel) in self.of_kind("floor") if travel > 0]


@pytest.fixture
def env():
    return simpy.Environment()


@pytest.fixture
def broker(env):
    return MessageBroker(env)


@pytest.fixture
def timing():
    return TimingConfig(time_per_floor_ms=2000, door_open_ms=3000, door_close_ms=500)


@pytest.fixture
def make_controller(env, broker, timing):
    """Build a controller with a RecordingListener attached"""
    def _make(initial_floor=0, service_floors=None, name="Elevator_1"):
        controller = ElevatorController(env, name, broker, timing=timing,
                                        initial_floor=initial_floor, service_floors=service_floors)
        listener = RecordingListener(env)
        controller.add_listener(listener)
        return controller, listener
    return _make
