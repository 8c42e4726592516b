import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from core.cookies import ResponseCookies

# Global context var for Trace ID
trace_id_var = contextvars.ContextVar("trace_id", default="-")


@dataclass
class RequestStore:
    """请求级存储：持有本次请求可变的响应 Cookie"""
    mutable_cookies: ResponseCookies = field(default_factory=ResponseCookies)


@dataclass
class ActionStore:
    """动作级存储：标记当前工作单元是否为数据变更请求"""
    is_action: bool = False


# Request / Action Context Vars
request_store_var: contextvars.ContextVar[Optional[RequestStore]] = contextvars.ContextVar(
    "request_store", default=None
)
action_store_var: contextvars.ContextVar[Optional[ActionStore]] = contextvars.ContextVar(
    "action_store", default=None
)


def get_request_store() -> Optional[RequestStore]:
    return request_store_var.get()


def get_action_store() -> Optional[ActionStore]:
    return action_store_var.get()


@contextmanager
def request_scope(store: Optional[RequestStore] = None) -> Iterator[RequestStore]:
    """在当前上下文中激活一个请求存储，退出时还原"""
    store = store if store is not None else RequestStore()
    token = request_store_var.set(store)
    try:
        yield store
    finally:
        request_store_var.reset(token)


@contextmanager
def action_scope(is_action: bool = True) -> Iterator[ActionStore]:
    """在当前上下文中激活一个动作存储，退出时还原"""
    store = ActionStore(is_action=is_action)
    token = action_store_var.set(store)
    try:
        yield store
    finally:
        action_store_var.reset(token)
