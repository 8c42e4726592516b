from enum import Enum

# 协议标识：区分重定向信号与同一捕获路径上的其他带 digest 的异常
REDIRECT_ERROR_CODE = "NEXT_REDIRECT"

DIGEST_SEPARATOR = ";"


class RedirectType(str, Enum):
    """客户端导航方式：压入新历史记录或替换当前记录"""
    push = "push"
    replace = "replace"

    def __str__(self) -> str:
        return self.value
