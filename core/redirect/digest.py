"""
Redirect digest codec.

A redirect signal travels through the exception channel as a single string::

    NEXT_REDIRECT;<type>;<url>;<status>;

The URL is user data and may itself contain ``;``. The tag, type and status
fields never do, so the URL is recovered positionally: everything between
the second field and the second-to-last field, re-joined with ``;``. The
last field is the empty string after the trailing separator and only
anchors the positions.
"""
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from core.exceptions import InvalidRedirectType, InvalidSignal, InvalidStatusCode
from core.redirect.status_codes import RedirectStatusCode, is_redirect_status_code
from core.redirect.types import DIGEST_SEPARATOR, REDIRECT_ERROR_CODE, RedirectType

_STATUS_RE = re.compile(r"[0-9]+")
_PRIMITIVES = (str, bytes, bytearray, int, float, complex, bool)


@dataclass(frozen=True)
class RedirectDigest:
    """Decoded redirect directive: navigation type, target URL and status."""
    type: RedirectType
    url: str
    status_code: RedirectStatusCode

    def encode(self) -> str:
        return encode_digest(self.type, self.url, self.status_code)

    @classmethod
    def parse(cls, digest: str) -> "RedirectDigest":
        return decode_digest(digest)


def coerce_redirect_type(value: Union[RedirectType, str]) -> RedirectType:
    try:
        return RedirectType(value)
    except ValueError:
        raise InvalidRedirectType(
            f"Invalid redirect type: {value!r}", context={"type": value}
        ) from None


def coerce_status_code(value: Union[RedirectStatusCode, int]) -> RedirectStatusCode:
    if not is_redirect_status_code(value):
        raise InvalidStatusCode(
            f"Invalid redirect status code: {value!r}",
            context={"status_code": value, "allowed": [int(s) for s in RedirectStatusCode]},
        )
    return RedirectStatusCode(value)


def encode_digest(
    type: Union[RedirectType, str],
    url: str,
    status_code: Union[RedirectStatusCode, int],
) -> str:
    """Serialize a directive. ``url`` is written verbatim, ``;`` included."""
    redirect_type = coerce_redirect_type(type)
    status = coerce_status_code(status_code)
    return DIGEST_SEPARATOR.join(
        [REDIRECT_ERROR_CODE, redirect_type.value, url, str(int(status)), ""]
    )


def get_digest(value: Any) -> Optional[str]:
    """Return the string digest carried by an error-like value, if any."""
    if value is None or isinstance(value, _PRIMITIVES):
        return None
    # recognition must never raise, whatever a foreign digest accessor does
    try:
        if isinstance(value, Mapping):
            digest = value.get("digest")
        else:
            digest = getattr(value, "digest", None)
    except Exception:
        return None
    return digest if isinstance(digest, str) else None


def _parse_fields(fields: List[str]) -> Optional[RedirectDigest]:
    # tag, type, status and the trailing anchor need at least four fields
    if len(fields) < 4:
        return None
    error_code, redirect_type = fields[0], fields[1]
    destination = DIGEST_SEPARATOR.join(fields[2:-2])
    status = fields[-2]

    if error_code != REDIRECT_ERROR_CODE:
        return None
    if redirect_type not in (RedirectType.push.value, RedirectType.replace.value):
        return None
    if not _STATUS_RE.fullmatch(status):
        return None
    status_code = int(status)
    if not is_redirect_status_code(status_code):
        return None
    return RedirectDigest(
        type=RedirectType(redirect_type),
        url=destination,
        status_code=RedirectStatusCode(status_code),
    )


def parse_digest(digest: Any) -> Optional[RedirectDigest]:
    """Decode ``digest``, or return None when it is not a redirect digest."""
    if not isinstance(digest, str):
        return None
    return _parse_fields(digest.split(DIGEST_SEPARATOR))


def decode_digest(digest: Any) -> RedirectDigest:
    parsed = parse_digest(digest)
    if parsed is None:
        raise InvalidSignal(context={"digest": digest})
    return parsed


def is_redirect_digest(digest: Any) -> bool:
    return parse_digest(digest) is not None
