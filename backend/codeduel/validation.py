import re

from codeduel.errors import InvalidRoomCode, ValidationError
from codeduel.models import ANY_DIFFICULTY, DIFFICULTIES

SUPPORTED_LANGUAGES = ('javascript', 'python', 'java')
ROOM_CODE_RE = re.compile(r'^[A-Z0-9]{6}$')


def validate_code(code, max_length=50000) -> str:
    if not code or not isinstance(code, str) or not code.strip():
        raise ValidationError('Code is required')
    if len(code) > max_length:
        raise ValidationError(f'Code too large (max {max_length // 1000}KB)')
    return code


def validate_language(language) -> str:
    if language not in SUPPORTED_LANGUAGES:
        raise ValidationError('Invalid language')
    return language


def validate_room_code(code) -> str:
    if not isinstance(code, str) or not ROOM_CODE_RE.match(code):
        raise InvalidRoomCode()
    return code


def normalize_difficulty(value) -> str:
    if isinstance(value, str) and value.lower() in DIFFICULTIES:
        return value.lower()
    return ANY_DIFFICULTY
