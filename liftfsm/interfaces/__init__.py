"""Interface definitions for controller observers"""

from .controller_listener import IControllerListener

__all__ = [
    'IControllerListener',
]
