"""Race domain services: metrics, rooms, state machine and dispatch.

This package contains the transport-free core of the race server. Socket
handlers and HTTP routes import from here and only translate between the
wire and these objects.
"""

from .dispatcher import EventDispatcher
from .registry import ConnectionRegistry
from .runtime import RaceRuntime
from .store import RoomStore

__all__ = ['EventDispatcher', 'ConnectionRegistry', 'RaceRuntime', 'RoomStore']
