class RedirectCoreError(Exception):
    """重定向核心基础异常类"""
    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message)
        self.context = context or {}

class InvalidSignal(RedirectCoreError):
    """
    非重定向信号（调用方使用错误）
    场景：对任意异常调用 type/status 访问器前未先检查 is_redirect_error
    """
    def __init__(self, message: str = "Not a redirect error", context: dict | None = None) -> None:
        super().__init__(message, context)

class InvalidStatusCode(RedirectCoreError, ValueError):
    """显式状态码不在合法重定向状态码集合内，构造时立即拒绝"""
    pass

class InvalidRedirectType(RedirectCoreError, ValueError):
    """导航类型既不是 push 也不是 replace"""
    pass
