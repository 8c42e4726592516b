from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional, List, Any, Union
from pathlib import Path

import logging

# 设置日志
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """应用配置类，使用Pydantic v2实现类型安全的配置管理"""

    # === 基础配置 ===
    APP_ENV: str = Field(
        default="development",
        description="应用环境: development, testing, production"
    )
    DEBUG: bool = Field(
        default=False,
        description="是否启用调试模式"
    )

    # === 日志配置 ===
    LOG_LEVEL: str = Field(
        default="INFO",
        description="日志级别: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    LOG_FORMAT: str = Field(default="text")
    LOG_INCLUDE_TRACEBACK: bool = Field(default=False)
    LOG_COLOR: bool = Field(default=True)
    LOG_DIR: Optional[Path] = Field(
        default=None,
        description="日志目录，为空时仅输出到控制台"
    )
    LOG_MAX_BYTES: int = Field(default=10 * 1024 * 1024)
    LOG_BACKUP_COUNT: int = Field(default=5)
    LOG_LEVEL_OVERRIDES: str = Field(default="")

    # === 重定向边界配置 ===
    ACTION_HEADER: str = Field(
        default="X-Action",
        description="标记数据变更动作请求的请求头"
    )
    ACTION_METHODS: Union[List[str], str] = Field(
        default=["POST"],
        description="可被视为数据变更动作的 HTTP 方法"
    )
    API_PREFIX: str = Field(
        default="/api/",
        description="该前缀下的请求收到 JSON 导航指令而非 HTTP 重定向"
    )
    NAVIGATION_HEADER: str = Field(
        default="X-Navigation",
        description="客户端路由发起的导航请求头"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=False,  # 允许在运行时修改配置
        title="应用配置",
    )

    @field_validator("ACTION_METHODS", mode="before")
    @classmethod
    def parse_list_fields(cls, v: Any) -> List[Any]:
        if isinstance(v, str):
            import json
            try:
                # 尝试 JSON 解析
                return list(json.loads(v))
            except json.JSONDecodeError:
                # 逗号分隔回退
                return [t.strip() for t in v.split(",") if t.strip()]
        return list(v)

    @field_validator("ACTION_METHODS", mode="after")
    @classmethod
    def normalize_methods(cls, v: List[str]) -> List[str]:
        return [m.upper() for m in v]

    @field_validator("LOG_FORMAT", mode="after")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"text", "json"}:
            logger.warning(f"未知日志格式 {v}，回退到 text")
            return "text"
        return v


# 单例模式获取配置 - 使用lru_cache确保全局只有一个实例
@lru_cache()
def get_settings() -> Settings:
    """获取配置实例，使用lru_cache实现单例模式"""
    return Settings()

# 全局配置实例，方便直接导入使用
settings = get_settings()
