from enum import IntEnum
from typing import Any


class RedirectStatusCode(IntEnum):
    """合法的重定向 HTTP 状态码集合"""
    SeeOther = 303
    TemporaryRedirect = 307
    PermanentRedirect = 308


def is_redirect_status_code(value: Any) -> bool:
    # bool is an int subclass but never a status code
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    try:
        RedirectStatusCode(value)
    except ValueError:
        return False
    return True
