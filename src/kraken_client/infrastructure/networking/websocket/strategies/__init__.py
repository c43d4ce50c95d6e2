from .connection import ConnectionStrategy
from .subscription import SubscriptionStrategy
from .message_parser import MessageParser

__all__ = ['ConnectionStrategy', 'SubscriptionStrategy', 'MessageParser']
