from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


def _runtime():
    return current_app.extensions['typerace']


@rooms.route('/room', methods=['POST'])
def create_room():
    room = _runtime().create_room()
    current_app.logger.info(f"[http-create] room={room.id}")
    return jsonify({'success': True, 'roomId': room.id}), 201


@rooms.route('/room/<string:room_id>', methods=['GET'])
def get_room(room_id):
    snapshot = _runtime().room_snapshot(room_id)
    if snapshot is None:
        return jsonify({'success': False, 'message': 'Room not found'}), 404
    return jsonify({'success': True, 'room': snapshot})
