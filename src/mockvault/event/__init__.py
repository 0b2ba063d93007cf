"""
MockVault Event Module

Bounded history of served mock calls.
"""

from .model import Event, RequestSnapshot, ResponseSnapshot
from .log import EventLog, EventScope

__all__ = [
    'Event',
    'RequestSnapshot',
    'ResponseSnapshot',
    'EventLog',
    'EventScope',
]
