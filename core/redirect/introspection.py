"""
Accessors for caught redirect signals.

Every accessor re-checks recognition first. ``get_url_from_redirect_error``
is forgiving and returns None for anything that is not a signal, so it can
be used as a filter; the type and status accessors raise ``InvalidSignal``.
"""
from typing import Any, Optional

from core.exceptions import InvalidSignal
from core.redirect.digest import RedirectDigest, get_digest, parse_digest
from core.redirect.status_codes import RedirectStatusCode
from core.redirect.types import DIGEST_SEPARATOR, RedirectType


def is_redirect_error(error: Any) -> bool:
    """
    Checks an error to determine if it's an error generated by the
    redirect helpers.

    :param error: the error that may reference a redirect error
    :return: True if the error is a redirect error
    """
    return parse_digest(get_digest(error)) is not None


def get_url_from_redirect_error(error: Any) -> Optional[str]:
    """
    Returns the encoded URL from the error if it's a redirect error, None
    otherwise. Note that this does not validate the URL returned.
    """
    if not is_redirect_error(error):
        return None
    # drop the tag and type in front, the status and trailing anchor behind
    fields = get_digest(error).split(DIGEST_SEPARATOR)
    return DIGEST_SEPARATOR.join(fields[2:-2])


def get_redirect_type_from_error(error: Any) -> RedirectType:
    if not is_redirect_error(error):
        raise InvalidSignal(context={"error": repr(error)})
    return RedirectType(get_digest(error).split(DIGEST_SEPARATOR, 2)[1])


def get_redirect_status_code_from_error(error: Any) -> RedirectStatusCode:
    if not is_redirect_error(error):
        raise InvalidSignal(context={"error": repr(error)})
    return RedirectStatusCode(int(get_digest(error).split(DIGEST_SEPARATOR)[-2]))


def get_redirect_directive(error: Any) -> RedirectDigest:
    """Decode type, URL and status of a caught signal in one pass."""
    parsed = parse_digest(get_digest(error))
    if parsed is None:
        raise InvalidSignal(context={"error": repr(error)})
    return parsed
