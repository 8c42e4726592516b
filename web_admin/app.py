import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.config import settings
from core.context import trace_id_var
from core.logging import setup_logging
from core.redirect import is_redirect_error
from web_admin.boundary import install_redirect_handler, redirect_error_handler
from web_admin.middlewares.context_middleware import ContextMiddleware
from web_admin.middlewares.trace_middleware import TraceMiddleware

logger = logging.getLogger(__name__)


async def global_exception_handler(request: Request, exc: Exception):
    # 任意类型的异常只要 digest 是重定向信号，就按重定向处理
    if is_redirect_error(exc):
        return await redirect_error_handler(request, exc)

    trace_id = trace_id_var.get()

    # 记录详细错误
    logger.error(f"Uncaught Exception: {str(exc)} [TraceID: {trace_id}]", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "message": str(exc) if settings.DEBUG else "服务器内部错误，请联系管理员",
            "trace_id": trace_id,
        },
    )


def create_app(configure_logging: bool = True, **kwargs) -> FastAPI:
    """创建挂载了上下文中间件与重定向边界的 FastAPI 应用

    configure_logging 为 True 时按 settings 初始化日志系统；
    宿主应用自行管理日志时传 False。
    """
    if configure_logging:
        setup_logging()

    app = FastAPI(**kwargs)

    # 后添加的中间件在外层：Trace 包裹 Context
    app.add_middleware(ContextMiddleware)
    app.add_middleware(TraceMiddleware)

    install_redirect_handler(app)
    app.add_exception_handler(Exception, global_exception_handler)
    return app
