"""Domain errors raised by the duel services.

Socket handlers catch these and turn them into ``room_error`` or
``submission_error`` events; nothing here is ever sent as a traceback.
"""


class DuelError(Exception):
    message = 'Something went wrong'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(DuelError):
    message = 'Invalid request'


class RateLimited(DuelError):
    message = 'Rate limit exceeded. Wait 1 minute.'


class ProblemNotFound(DuelError):
    message = 'Problem not found'


class MatchFinished(DuelError):
    message = 'Match already finished'


class RoomError(DuelError):
    message = 'Room error'


class InvalidRoomCode(RoomError):
    message = 'Invalid room code format'


class RoomNotFound(RoomError):
    message = 'Room not found'


class RoomFull(RoomError):
    message = 'Room is full'


class AlreadyInRoom(RoomError):
    message = 'You are already in this room'


class NotRoomHost(RoomError):
    message = 'Only host can start the match'


class RoomNotReady(RoomError):
    message = 'Need 2 players to start'
