def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_create_room(client):
    res = client.post('/api/room')
    assert res.status_code == 201
    data = res.get_json()
    assert data['success'] is True
    assert len(data['roomId']) == 8


def test_get_room_snapshot(client):
    room_id = client.post('/api/room').get_json()['roomId']
    res = client.get(f'/api/room/{room_id}')
    assert res.status_code == 200
    data = res.get_json()
    assert data['success'] is True
    room = data['room']
    assert room['id'] == room_id
    assert room['state'] == 'waiting'
    assert room['startTime'] is None
    assert room['maxPlayers'] == 3
    assert room['players'] == []
    assert len(room['text'].split(' ')) == 5


def test_get_unknown_room(client):
    res = client.get('/api/room/nope')
    assert res.status_code == 404
    assert res.get_json() == {'success': False, 'message': 'Room not found'}


def test_joined_room_visible_over_http(client, sio_client):
    sio_client.emit('join-room', {'roomId': 'shared', 'user': {'uid': 'u1'}})
    room = client.get('/api/room/shared').get_json()['room']
    assert [p['user'] for p in room['players']] == [{'uid': 'u1'}]


def test_default_config_lives_in_package():
    from typerace.config import Config
    assert Config.WORD_COUNT_OPTIONS == (10, 25, 50, 100, 150)
    assert Config.SOCKETIO_NAMESPACE == '/'
