import re
from typing import Optional

from utils.errors import InvalidOperation

_ANGLE_BRACKETS = re.compile(r'[<>]')
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, field: str = 'text') -> str:
    """Strip markup characters and control bytes from user supplied text"""
    if text is None or text == '':
        return ''
    if not isinstance(text, str):
        raise InvalidOperation(f"{field} must be a string")

    cleaned = _CONTROL_CHARS.sub('', _ANGLE_BRACKETS.sub('', text)).strip()
    if max_length is not None:
        cleaned = cleaned[:max_length]
    return cleaned
