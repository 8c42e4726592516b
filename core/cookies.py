"""
Mutable response cookie jar.

A request store owns one jar per request. Code inside the request writes
cookies into it, and whoever finally produces the HTTP response copies the
pending entries onto that response with :meth:`ResponseCookies.apply_to`.
"""
from typing import Any, Dict, Iterator, Optional

from starlette.responses import Response


class ResponseCookies:
    """Pending ``Set-Cookie`` operations for the current response."""

    def __init__(self) -> None:
        self._cookies: Dict[str, Dict[str, Any]] = {}
        self._deleted: Dict[str, Dict[str, Any]] = {}

    def set(self, name: str, value: str, **options: Any) -> "ResponseCookies":
        # options mirror starlette's Response.set_cookie keyword arguments
        self._deleted.pop(name, None)
        self._cookies[name] = {"value": value, **options}
        return self

    def get(self, name: str) -> Optional[str]:
        entry = self._cookies.get(name)
        return entry["value"] if entry else None

    def delete(self, name: str, **options: Any) -> "ResponseCookies":
        self._cookies.pop(name, None)
        self._deleted[name] = options
        return self

    def apply_to(self, response: Response) -> Response:
        for name, options in self._deleted.items():
            response.delete_cookie(name, **options)
        for name, entry in self._cookies.items():
            options = {k: v for k, v in entry.items() if k != "value"}
            response.set_cookie(name, entry["value"], **options)
        return response

    def __contains__(self, name: object) -> bool:
        return name in self._cookies

    def __iter__(self) -> Iterator[str]:
        return iter(self._cookies)

    def __len__(self) -> int:
        return len(self._cookies)

    def __repr__(self) -> str:
        return f"ResponseCookies(set={list(self._cookies)}, deleted={list(self._deleted)})"
