"""
Redirect signal construction.

``redirect()`` and ``permanent_redirect()`` can be called from anywhere inside
a request's unit of work. They never return: they raise a ``RedirectError``
whose digest carries the directive up to the boundary layer, which turns it
into an HTTP redirect or a client navigation instruction.
"""
import logging
from typing import NoReturn, Optional, Union

from core.context import get_action_store, get_request_store
from core.cookies import ResponseCookies
from core.redirect.digest import encode_digest, parse_digest
from core.redirect.status_codes import RedirectStatusCode
from core.redirect.types import REDIRECT_ERROR_CODE, RedirectType

logger = logging.getLogger(__name__)


class RedirectError(Exception):
    """
    Control-transfer exception carrying a redirect digest.

    Not a failure: the boundary layer catches it and redirects. The cookie
    jar is a reference to the request store's jar, never a copy.
    """

    def __init__(self, digest: str, mutable_cookies: Optional[ResponseCookies] = None) -> None:
        super().__init__(REDIRECT_ERROR_CODE)
        self.digest = digest
        self.mutable_cookies = mutable_cookies

    def __reduce__(self):
        return (self.__class__, (self.digest,))

    @property
    def url(self) -> Optional[str]:
        parsed = parse_digest(self.digest)
        return parsed.url if parsed else None

    @property
    def type(self) -> Optional[RedirectType]:
        parsed = parse_digest(self.digest)
        return parsed.type if parsed else None

    @property
    def status_code(self) -> Optional[RedirectStatusCode]:
        parsed = parse_digest(self.digest)
        return parsed.status_code if parsed else None

    def __repr__(self) -> str:
        return f"RedirectError(digest={self.digest!r})"


def get_redirect_error(
    url: str,
    type: Union[RedirectType, str] = RedirectType.replace,
    status_code: Union[RedirectStatusCode, int] = RedirectStatusCode.TemporaryRedirect,
) -> RedirectError:
    """Build (without raising) a redirect signal for ``url``.

    Raises InvalidStatusCode / InvalidRedirectType for values outside the
    protocol, so a malformed signal can never leave this function.
    """
    digest = encode_digest(type, url, status_code)
    request_store = get_request_store()
    error = RedirectError(
        digest,
        mutable_cookies=request_store.mutable_cookies if request_store else None,
    )
    logger.debug(
        f"[Redirect] 构造重定向信号: type={type}, url={url}, status={int(status_code)}, "
        f"cookies={'attached' if error.mutable_cookies is not None else 'none'}"
    )
    return error


def raise_redirect(
    url: str,
    type: Union[RedirectType, str] = RedirectType.replace,
    status_code: Optional[Union[RedirectStatusCode, int]] = None,
    *,
    permanent: bool = False,
) -> NoReturn:
    """Raise a redirect signal, picking the default status from the action context.

    Inside a mutating action the default is 303 so the client follows up
    with a GET instead of re-submitting. Otherwise 307, or 308 when
    ``permanent``. An explicit ``status_code`` always wins.
    """
    if status_code is None:
        action_store = get_action_store()
        if action_store is not None and action_store.is_action:
            status_code = RedirectStatusCode.SeeOther
        elif permanent:
            status_code = RedirectStatusCode.PermanentRedirect
        else:
            status_code = RedirectStatusCode.TemporaryRedirect
    raise get_redirect_error(url, type, status_code)


def redirect(url: str, type: Union[RedirectType, str] = RedirectType.replace) -> NoReturn:
    """
    Redirect the client to another URL.

    - In a page request the boundary answers with a 307 redirect.
    - In a mutating action the boundary answers with a 303.
    """
    raise_redirect(url, type)


def permanent_redirect(url: str, type: Union[RedirectType, str] = RedirectType.replace) -> NoReturn:
    """
    Permanently redirect the client to another URL.

    Answered with a 308, or a 303 inside a mutating action.
    """
    raise_redirect(url, type, permanent=True)
