import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of browser origins allowed to open sockets
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
    ).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Judge0-compatible execution service
    JUDGE0_URL = os.environ.get('JUDGE0_URL') or 'http://localhost:2358'
    JUDGE_TIMEOUT_SEC = float(os.environ.get('JUDGE_TIMEOUT_SEC', '15'))
    JUDGE_CPU_TIME_LIMIT = float(os.environ.get('JUDGE_CPU_TIME_LIMIT', '5'))
    JUDGE_WALL_TIME_LIMIT = float(os.environ.get('JUDGE_WALL_TIME_LIMIT', '10'))
    JUDGE_MEMORY_LIMIT = int(os.environ.get('JUDGE_MEMORY_LIMIT', '256000'))
    # Submission limits
    MAX_CODE_LENGTH = int(os.environ.get('MAX_CODE_LENGTH', '50000'))
    SUBMISSION_LIMIT = int(os.environ.get('SUBMISSION_LIMIT', '5'))
    SUBMISSION_WINDOW_SEC = float(os.environ.get('SUBMISSION_WINDOW_SEC', '60'))
    # Custom rooms that never start are swept after this long (seconds)
    ROOM_IDLE_TIMEOUT_SEC = int(os.environ.get('ROOM_IDLE_TIMEOUT_SEC', '3600'))
    # Sweep interval (sec). 0 disables.
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get('ROOM_SWEEP_INTERVAL_SEC', '300'))
