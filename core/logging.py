"""
统一日志模块 (Core Logging)
标准 logging 处理器 + structlog 前端，支持 text/json 两种输出格式与滚动归档
"""

import json
import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog
from dotenv import find_dotenv, load_dotenv

from core.config import Settings, settings as default_settings
from core.context import trace_id_var

# Simple redaction keywords
_REDACT_KEYS = {"token", "apikey", "api_key", "authorization", "password", "secret", "cookie"}

_COMPILED_PATTERNS = []
for _k in _REDACT_KEYS:
    _e = re.escape(_k)
    _COMPILED_PATTERNS.extend(
        [
            (re.compile(rf"({_e}\s*=\s*)([^\s;,]+)", re.IGNORECASE), r"\1***"),
            (re.compile(rf'("{_e}"\s*:\s*")(.*?)(")', re.IGNORECASE), r"\1***\3"),
            (re.compile(rf"('{_e}'\s*:\s*')(.*?)(')", re.IGNORECASE), r"\1***\3"),
        ]
    )


def _redact(text: str) -> str:
    if not text:
        return text
    masked = text
    for _p, _r in _COMPILED_PATTERNS:
        masked = _p.sub(_r, masked)
    return masked


class JsonFormatter(logging.Formatter):
    """JSON 格式化器"""

    def __init__(
        self, include_traceback: bool = True, datefmt: Optional[str] = None
    ) -> None:
        super().__init__(datefmt=datefmt)
        self.include_traceback = include_traceback
        self.datefmt = datefmt or "%Y-%m-%dT%H:%M:%S%z"

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": _redact(record.getMessage()),
            "process": record.process,
            "thread": record.threadName,
            "correlation_id": getattr(record, "correlation_id", "-"),
            "func_name": record.funcName,
            "lineno": record.lineno,
        }

        # 附加异常信息
        if record.exc_info and self.include_traceback:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColorTextFormatter(logging.Formatter):
    """标准彩色文本格式化器"""

    _COLORS = {
        "DEBUG": "\x1b[90m",  # 灰
        "INFO": "\x1b[32m",  # 绿
        "WARNING": "\x1b[33m",  # 黄
        "ERROR": "\x1b[31m",  # 红
        "CRITICAL": "\x1b[35m",  # 品红
    }
    _RESET = "\x1b[0m"

    def __init__(
        self, use_color: bool = True, datefmt: Optional[str] = None
    ) -> None:
        fmt = "%(asctime)s [%(correlation_id)s][%(levelname)s][%(name)s] %(message)s"
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        out = _redact(super().format(record))
        if not self.use_color:
            return out
        color = self._COLORS.get(record.levelname)
        return f"{color}{out}{self._RESET}" if color else out


class _ContextFilter(logging.Filter):
    """Inject correlation_id from the trace context, record.extra or env."""

    def filter(self, record: logging.LogRecord) -> bool:
        cid = trace_id_var.get()
        if cid == "-":
            cid = getattr(record, "correlation_id", None)
            if cid is None:
                cid = os.getenv("CORRELATION_ID", "-")
        record.correlation_id = cid
        return True


class SafeLoggerFactory(structlog.stdlib.LoggerFactory):
    """确保 logger name 永远是字符串"""
    def __call__(self, *args, **kwargs):
        if args and args[0] is None:
            args = ("root",) + args[1:]
        elif not args:
            args = ("root",)
        return super().__call__(*args, **kwargs)


def configure_structlog() -> None:
    """配置 structlog 以对接标准 logging 系统"""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        context_class=dict,
        logger_factory=SafeLoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _build_formatter(cfg: Settings, use_color: bool) -> logging.Formatter:
    if cfg.LOG_FORMAT == "json":
        return JsonFormatter(include_traceback=cfg.LOG_INCLUDE_TRACEBACK)
    return ColorTextFormatter(use_color=use_color)


def setup_logging(cfg: Optional[Settings] = None) -> logging.Logger:
    """配置日志系统，包括滚动归档"""
    # 优先加载 .env
    load_dotenv(find_dotenv(usecwd=True))
    cfg = cfg or default_settings

    configure_structlog()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, cfg.LOG_LEVEL.upper(), logging.INFO))

    # 移除现有处理器
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    # Console Handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(_build_formatter(cfg, use_color=cfg.LOG_COLOR))
    console_handler.addFilter(_ContextFilter())
    root_logger.addHandler(console_handler)

    # File Handler (Rolling)
    if cfg.LOG_DIR:
        log_dir = Path(cfg.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_dir / "app.log"),
            maxBytes=cfg.LOG_MAX_BYTES,
            backupCount=cfg.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(_build_formatter(cfg, use_color=False))
        file_handler.addFilter(_ContextFilter())
        root_logger.addHandler(file_handler)

    # Logger Overrides
    for item in cfg.LOG_LEVEL_OVERRIDES.split(","):
        item = item.strip()
        if not item or "=" not in item:
            continue
        name, lvl = item.split("=", 1)
        name = name.strip()
        if name:
            logging.getLogger(name).setLevel(getattr(logging, lvl.strip().upper(), logging.WARNING))

    structlog.get_logger(__name__).info(
        "Log system initialized",
        level=logging.getLevelName(root_logger.level),
        format=cfg.LOG_FORMAT,
        log_dir=str(cfg.LOG_DIR) if cfg.LOG_DIR else None,
    )
    return root_logger


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
