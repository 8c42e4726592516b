from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from core.context import RequestStore, ActionStore, request_store_var, action_store_var
from core.config import settings
from core.redirect import is_redirect_error
from web_admin.boundary import redirect_error_handler
import logging

logger = logging.getLogger(__name__)

class ContextMiddleware(BaseHTTPMiddleware):
    """
    Context Middleware
    Initializes the request store (mutable response cookies) and the action
    store (is this a mutating action) for the duration of one request.
    Must run BEFORE endpoints so redirect signals can pick the context up.

    Any exception escaping the endpoint whose digest is a redirect signal is
    answered here, whatever its class; everything else propagates.
    """
    def __init__(self, app, action_header: str | None = None, action_methods: list[str] | None = None):
        super().__init__(app)
        self.action_header = action_header or settings.ACTION_HEADER
        self.action_methods = {m.upper() for m in (action_methods or settings.ACTION_METHODS)}

    def is_action_request(self, request: Request) -> bool:
        return request.method.upper() in self.action_methods and self.action_header in request.headers

    async def dispatch(self, request: Request, call_next):
        # 1. Request Store
        token_request = request_store_var.set(RequestStore())

        # 2. Action Store
        is_action = self.is_action_request(request)
        token_action = action_store_var.set(ActionStore(is_action=is_action))
        if is_action:
            logger.debug(f"[Context] 动作请求: 方法={request.method}, 路径={request.url.path}")

        try:
            return await call_next(request)
        except Exception as e:
            if not is_redirect_error(e):
                raise
            return await redirect_error_handler(request, e)
        finally:
            request_store_var.reset(token_request)
            action_store_var.reset(token_action)
