"""
liftfsm - Single-car elevator controller

A finite-state machine that serializes floor requests into one car's travel
plan and advances through timed phases on a SimPy environment.
"""

__version__ = "0.1.0"

from .core.controller import ElevatorController
from .core.door import Door
from .core.entity import Entity
from .core.request_queue import RequestQueue, order_requests
from .core.states import DoorState, ElevatorState

from .infrastructure.message_broker import MessageBroker
from .infrastructure.realtime_env import RealtimeEnvironment
from .infrastructure.request_inbox import RequestInbox

from .interfaces.controller_listener import IControllerListener

__all__ = [
    'ElevatorController',
    'Door',
    'Entity',
    'RequestQueue',
    'order_requests',
    'DoorState',
    'ElevatorState',
    'MessageBroker',
    'RealtimeEnvironment',
    'RequestInbox',
    'IControllerListener',
]
