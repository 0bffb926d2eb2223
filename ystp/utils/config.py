"""配置模块。

提供环境变量和配置的加载功能。
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置设置。

    从环境变量加载配置，支持.env文件。
    """

    # 应用设置
    HOST: str = "0.0.0.0"
    PORT: int = 8787

    # 日志设置
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: Path = Path("logs")

    # 存储设置
    STORAGE_TYPE: str = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_PREFIX: str = "ystp:session:"
    REDIS_EXPIRY: int = 0

    # 口令设置
    CODE_WORD_COUNT: int = 5
    CODE_SEPARATOR: str = "-"

    # 连接断开策略
    CLOSURE_POLICY: str = "asymmetric"

    # 每个会话邮箱中最多积压的数据帧数
    MAX_PENDING_FRAMES: int = 32

    @field_validator("LOG_LEVEL")
    def log_level_must_be_valid(cls, v: str) -> str:
        """验证日志级别是否有效。"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("STORAGE_TYPE")
    def storage_type_must_be_valid(cls, v: str) -> str:
        """验证存储类型是否已注册。"""
        from ..session.storage import StorageFactory

        available = StorageFactory.available()
        if v.lower() not in available:
            raise ValueError(f"STORAGE_TYPE must be one of {available}")
        return v.lower()

    @field_validator("MAX_PENDING_FRAMES")
    def max_pending_must_be_positive(cls, v: int) -> int:
        """验证积压帧数为正整数。"""
        if v < 1:
            raise ValueError("MAX_PENDING_FRAMES must be a positive integer")
        return v

    @field_validator("CODE_WORD_COUNT")
    def word_count_must_be_positive(cls, v: int) -> int:
        """验证口令词数为正整数。"""
        if v < 1:
            raise ValueError("CODE_WORD_COUNT must be a positive integer")
        return v

    @field_validator("CLOSURE_POLICY")
    def closure_policy_must_be_valid(cls, v: str) -> str:
        """验证断开策略是否有效。"""
        valid_policies = ["asymmetric", "uniform"]
        if v.lower() not in valid_policies:
            raise ValueError(f"CLOSURE_POLICY must be one of {valid_policies}")
        return v.lower()

    @field_validator("REDIS_EXPIRY")
    def expiry_must_not_be_negative(cls, v: int) -> int:
        """验证过期时间不为负数。"""
        if v < 0:
            raise ValueError("REDIS_EXPIRY must not be negative")
        return v

    class Config:
        """Pydantic配置类。"""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# 全局配置实例
settings = Settings()


def get_settings() -> Settings:
    """获取配置实例，用于依赖注入。"""
    return settings
