from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from typerace.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('SOCKET_CORS_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One race runtime per app; handlers reach it through current_app
    from typerace.services.race import RaceRuntime
    flask_app.extensions['typerace'] = RaceRuntime.from_config(flask_app.config)

    # Import and register blueprints here
    from typerace.main import main
    flask_app.register_blueprint(main)

    from typerace.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api')

    # Register Socket.IO event handlers
    from typerace.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    flask_app.logger.info(
        f"[init] max_players={flask_app.config.get('MAX_PLAYERS_PER_ROOM')} "
        f"words={flask_app.config.get('DEFAULT_WORD_COUNT')} join_policy={flask_app.config.get('JOIN_POLICY')}"
    )
    return flask_app
