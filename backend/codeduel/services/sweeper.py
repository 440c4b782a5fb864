from codeduel import socketio

_started_apps = set()


def sweep_once(app) -> list:
    arena = app.extensions['codeduel']
    expired = arena.rooms.sweep_idle()
    if expired:
        app.logger.info(f"[sweep] expired={len(expired)} rooms={','.join(expired)}")
    return expired


def start_room_sweeper(app) -> bool:
    """Start the background loop that expires idle custom rooms.

    - No-ops in TESTING mode or when ROOM_SWEEP_INTERVAL_SEC is 0
    - Starts at most once per app
    - Only rooms still in the registry are touched, so started duels are never swept
    """
    interval = int(app.config.get('ROOM_SWEEP_INTERVAL_SEC', 300))
    if app.config.get('TESTING') or interval <= 0:
        return False
    if id(app) in _started_apps:
        return False
    _started_apps.add(id(app))

    def _worker():
        app.logger.info(f"[sweep-start] interval={interval}s idle_timeout={app.config.get('ROOM_IDLE_TIMEOUT_SEC')}s")
        while True:
            socketio.sleep(interval)
            try:
                sweep_once(app)
            except Exception:
                app.logger.exception("[sweep-error]")

    socketio.start_background_task(_worker)
    return True
