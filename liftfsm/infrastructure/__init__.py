"""Infrastructure components for the controller"""

from .message_broker import MessageBroker
from .realtime_env import RealtimeEnvironment
from .request_inbox import RequestInbox

__all__ = [
    'MessageBroker',
    'RealtimeEnvironment',
    'RequestInbox',
]
