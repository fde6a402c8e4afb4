from typing import Any, Dict, Optional

from typerace.models import ConnectionBinding


class ConnectionRegistry:
    """Tracks which room/user each live connection is bound to."""

    def __init__(self):
        self._bindings: Dict[str, ConnectionBinding] = {}

    def __len__(self):
        return len(self._bindings)

    def lookup(self, connection_id: str) -> Optional[ConnectionBinding]:
        return self._bindings.get(connection_id)

    def bind(self, connection_id: str, room_id: str, user: Dict[str, Any]) -> ConnectionBinding:
        """Bind a connection, replacing any earlier binding it had."""
        binding = ConnectionBinding(connection_id, room_id, user)
        self._bindings[connection_id] = binding
        return binding

    def unbind(self, connection_id: str) -> Optional[ConnectionBinding]:
        return self._bindings.pop(connection_id, None)

    def clear(self) -> None:
        self._bindings.clear()
