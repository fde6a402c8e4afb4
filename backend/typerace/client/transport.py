import functools
import logging
import threading

import socketio

from typerace.services.race.events import (
    CONNECTED, GAME_FINISHED, GAME_RESET, GAME_STARTED, JOIN_REJECTED,
    PLAYER_FINISHED, PLAYER_LEFT, PLAYERS_PROGRESS, ROOM_FULL, ROOM_STATE,
)
from .agent import RaceAgent

logger = logging.getLogger(__name__)

SERVER_EVENTS = (
    CONNECTED, ROOM_STATE, ROOM_FULL, JOIN_REJECTED, GAME_STARTED,
    PLAYERS_PROGRESS, PLAYER_FINISHED, GAME_FINISHED, GAME_RESET, PLAYER_LEFT,
)


class SocketRaceClient:
    """Drives a RaceAgent over a python-socketio connection.

    Socket events and the periodic tick run on different workers, so every
    agent call goes through one lock.
    """

    def __init__(self, url, room_id, user, tick_interval=0.1, sio=None, **agent_options):
        self.url = url
        self.tick_interval = tick_interval
        self.sio = sio or socketio.Client()
        self.agent = RaceAgent(room_id, user, emit=self._emit, **agent_options)
        self._lock = threading.RLock()
        self._running = False
        self._tick_task = None

        self.sio.on('connect', self._on_connect)
        self.sio.on('disconnect', self._on_disconnect)
        for name in SERVER_EVENTS:
            self.sio.on(name, functools.partial(self._on_server_event, name))

    def _emit(self, event, payload):
        self.sio.emit(event, payload)

    def _on_connect(self):
        logger.info(f"[client] connected url={self.url} room={self.agent.room_id}")
        with self._lock:
            self.agent.join()

    def _on_disconnect(self, *args):
        logger.info(f"[client] disconnected room={self.agent.room_id}")

    def _on_server_event(self, name, data=None):
        with self._lock:
            self.agent.handle(name, data)

    def _tick_loop(self):
        while self._running:
            self.sio.sleep(self.tick_interval)
            with self._lock:
                self.agent.tick()

    def connect(self, **kwargs):
        if self._running:
            return
        self.sio.connect(self.url, **kwargs)
        self._running = True
        self._tick_task = self.sio.start_background_task(self._tick_loop)

    def disconnect(self):
        self._running = False
        self.sio.disconnect()
        task, self._tick_task = self._tick_task, None
        if task is not None:
            task.join()

    def type_text(self, value):
        with self._lock:
            return self.agent.handle_input(value)

    def press(self, char):
        with self._lock:
            return self.agent.press(char)

    def start(self, word_count=None):
        with self._lock:
            self.agent.request_start(word_count)

    def reset(self):
        with self._lock:
            self.agent.request_reset()
