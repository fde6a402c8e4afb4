from flask import current_app, request
from flask_socketio import emit

from typerace import socketio
from typerace.services.race.events import (
    CONNECTED, JOIN_ROOM, RESET_GAME, START_GAME, TYPING_UPDATE,
    Disconnect, InvalidEvent, Outbound, parse_event,
)


def _runtime():
    return current_app.extensions['typerace']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _deliver(message: Outbound) -> None:
    namespace = request.namespace  # type: ignore
    for sid in message.recipients:
        socketio.emit(message.event, message.data, to=sid, namespace=namespace)


def _handle_inbound(name, data) -> None:
    sid = _get_sid()
    try:
        event = parse_event(name, data, sid)
    except InvalidEvent as exc:
        current_app.logger.warning(f"[invalid-event] event={name} sid={sid} error={exc}")
        return
    _runtime().process(event, _deliver)


def handle_connect(auth=None):
    emit(CONNECTED, {'connectionId': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _runtime().process(Disconnect(sid), _deliver)


def handle_join_room(data=None):
    _handle_inbound(JOIN_ROOM, data)


def handle_start_game(data=None):
    _handle_inbound(START_GAME, data)


def handle_typing_update(data=None):
    _handle_inbound(TYPING_UPDATE, data)


def handle_reset_game(data=None):
    _handle_inbound(RESET_GAME, data)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the race channel handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(JOIN_ROOM, handle_join_room, namespace=namespace)
    socketio.on_event(START_GAME, handle_start_game, namespace=namespace)
    socketio.on_event(TYPING_UPDATE, handle_typing_update, namespace=namespace)
    socketio.on_event(RESET_GAME, handle_reset_game, namespace=namespace)
