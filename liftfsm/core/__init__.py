"""Core controller entities"""

from .entity import Entity
from .states import ElevatorState, DoorState
from .request_queue import RequestQueue, order_requests
from .door import Door
from .controller import ElevatorController

__all__ = [
    'Entity',
    'ElevatorState',
    'DoorState',
    'RequestQueue',
    'order_requests',
    'Door',
    'ElevatorController',
]
