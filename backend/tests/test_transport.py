from typerace.client import SocketRaceClient


class FakeTask:
    def __init__(self, target):
        self.target = target
        self.joined = False

    def join(self):
        self.joined = True


class FakeSio:
    def __init__(self):
        self.handlers = {}
        self.emitted = []
        self.tasks = []
        self.connected_to = None

    def on(self, event, handler):
        self.handlers[event] = handler

    def emit(self, event, data):
        self.emitted.append((event, data))

    def connect(self, url, **kwargs):
        self.connected_to = url
        self.handlers['connect']()

    def disconnect(self):
        self.connected_to = None

    def start_background_task(self, target, *args):
        task = FakeTask(target)
        self.tasks.append(task)
        return task

    def sleep(self, seconds):
        pass


def test_client_joins_on_connect_and_forwards_broadcasts(clock):
    sio = FakeSio()
    race = SocketRaceClient('http://localhost:3001', 'r1', {'uid': 'u1'}, sio=sio, clock=clock)
    race.connect()
    assert sio.connected_to == 'http://localhost:3001'
    assert sio.emitted == [('join-room', {'roomId': 'r1', 'user': {'uid': 'u1'}})]
    assert len(sio.tasks) == 1

    sio.handlers['connected']({'connectionId': 'me'})
    sio.handlers['game-started']({'text': 'hi', 'startTime': 1})
    assert race.agent.connection_id == 'me'
    assert race.press('h')
    assert race.type_text('hi')
    assert sio.emitted[-1][0] == 'typing-update'
    assert sio.emitted[-1][1]['finished'] is True

    race.disconnect()
    assert sio.connected_to is None


def test_start_and_reset_requests(clock):
    sio = FakeSio()
    race = SocketRaceClient('http://x', 'r1', {}, sio=sio, clock=clock)
    race.start(word_count=10)
    race.reset()
    assert sio.emitted == [
        ('start-game', {'roomId': 'r1', 'wordCount': 10}),
        ('reset-game', {'roomId': 'r1'}),
    ]


def test_connect_starts_a_single_tick_loop(clock):
    sio = FakeSio()
    race = SocketRaceClient('http://x', 'r1', {}, sio=sio, clock=clock)
    race.connect()
    race.connect()
    assert len(sio.tasks) == 1
    assert len([e for e, _ in sio.emitted if e == 'join-room']) == 1

    first = sio.tasks[0]
    race.disconnect()
    assert first.joined

    race.connect()
    assert len(sio.tasks) == 2
    race.disconnect()
    assert sio.tasks[1].joined
