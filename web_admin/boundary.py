"""
Redirect boundary.

Catches redirect signals raised anywhere inside a request and turns them
into a response: an HTTP redirect for page requests, or a JSON navigation
instruction for API and client-router requests. Anything that is not a
redirect signal is re-raised untouched.
"""
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from core.config import settings
from core.redirect import RedirectDigest, RedirectError, get_redirect_directive, is_redirect_error

logger = logging.getLogger(__name__)


def wants_navigation_payload(request: Request) -> bool:
    """Client routers and API callers get a JSON instruction instead of a 3xx."""
    if request.url.path.startswith(settings.API_PREFIX):
        return True
    return settings.NAVIGATION_HEADER in request.headers


def build_redirect_response(directive: RedirectDigest, as_navigation: bool) -> Response:
    if as_navigation:
        return JSONResponse(
            status_code=200,
            content={
                "redirect": directive.url,
                "type": directive.type.value,
                "status": int(directive.status_code),
            },
            headers={
                "X-Redirect-Location": directive.url,
                "X-Redirect-Type": directive.type.value,
            },
        )
    return RedirectResponse(url=directive.url, status_code=int(directive.status_code))


async def redirect_error_handler(request: Request, exc: Exception) -> Response:
    if not is_redirect_error(exc):
        raise exc

    directive = get_redirect_directive(exc)
    response = build_redirect_response(directive, wants_navigation_payload(request))

    cookies = getattr(exc, "mutable_cookies", None)
    if cookies is not None:
        cookies.apply_to(response)

    logger.info(
        f"↪️ [Redirect] {request.method} {request.url.path} -> {directive.url} "
        f"(type={directive.type.value}, status={int(directive.status_code)}, cookies={len(cookies) if cookies else 0})"
    )
    return response


def install_redirect_handler(app: FastAPI) -> FastAPI:
    app.add_exception_handler(RedirectError, redirect_error_handler)
    return app


def catch_redirect(
    func: Callable[..., Any], *args: Any, **kwargs: Any
) -> Tuple[Any, Optional[RedirectDigest]]:
    """Run a unit of work outside HTTP and probe for a redirect signal.

    Returns ``(result, None)`` on normal completion, ``(None, directive)``
    when the work redirected. Other exceptions propagate.
    """
    try:
        return func(*args, **kwargs), None
    except Exception as e:
        if not is_redirect_error(e):
            raise
        return None, get_redirect_directive(e)


async def acatch_redirect(
    func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
) -> Tuple[Any, Optional[RedirectDigest]]:
    """Async variant of :func:`catch_redirect`."""
    try:
        return await func(*args, **kwargs), None
    except Exception as e:
        if not is_redirect_error(e):
            raise
        return None, get_redirect_directive(e)
