from core.redirect.types import REDIRECT_ERROR_CODE, RedirectType
from core.redirect.status_codes import RedirectStatusCode, is_redirect_status_code
from core.redirect.digest import (
    RedirectDigest,
    decode_digest,
    encode_digest,
    get_digest,
    is_redirect_digest,
    parse_digest,
)
from core.redirect.introspection import (
    get_redirect_directive,
    get_redirect_status_code_from_error,
    get_redirect_type_from_error,
    get_url_from_redirect_error,
    is_redirect_error,
)
from core.redirect.signal import (
    RedirectError,
    get_redirect_error,
    permanent_redirect,
    raise_redirect,
    redirect,
)

__all__ = [
    "REDIRECT_ERROR_CODE",
    "RedirectType",
    "RedirectStatusCode",
    "is_redirect_status_code",
    "RedirectDigest",
    "decode_digest",
    "encode_digest",
    "get_digest",
    "is_redirect_digest",
    "parse_digest",
    "get_redirect_directive",
    "get_redirect_status_code_from_error",
    "get_redirect_type_from_error",
    "get_url_from_redirect_error",
    "is_redirect_error",
    "RedirectError",
    "get_redirect_error",
    "permanent_redirect",
    "raise_redirect",
    "redirect",
]
