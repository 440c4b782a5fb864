from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, judge=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Shared duel state and services, one set per app
    from codeduel.services import Arena
    from codeduel.socketio_events import make_emitter
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    flask_app.extensions['codeduel'] = Arena(
        flask_app.config,
        emit=make_emitter(namespace),
        judge=judge,
        logger=flask_app.logger,
    )

    from codeduel.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    # Importing here ensures the handlers bind to the initialized socketio instance
    from codeduel.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    from codeduel.services.sweeper import start_room_sweeper
    start_room_sweeper(flask_app)

    return flask_app
