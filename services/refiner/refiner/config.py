"""全局配置加载模块：从环境变量构建运行参数并提供缓存访问。"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _csv_to_list(value: str) -> list[str]:
    """将逗号分隔字符串转换为去空白列表。"""
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """服务运行配置对象，从 ST_ 前缀环境变量读取并提供类型化访问。"""
    model_config = SettingsConfigDict(env_prefix="ST_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "StructuralThinking Refiner"
    app_version: str = "0.2.0"
    api_prefix: str = "/api/v1"
    environment: str = "dev"
    cors_allowed_origins: str = ""
    cors_allowed_methods: str = "GET,POST,OPTIONS"
    cors_allowed_headers: str = "Authorization,Content-Type,X-Request-Id"
    cors_allow_credentials: bool = False

    cache_max_size: int = Field(default=500, gt=0)
    cache_ttl_seconds: float = Field(default=600.0, gt=0)
    cache_cleanup_interval_seconds: float = Field(default=300.0, gt=0)

    # 评分参数覆盖项，仅在启动时读取一次。
    clarity_base_score: float | None = Field(default=None, ge=0, le=1)
    completeness_base_score: float | None = Field(default=None, ge=0, le=1)
    max_prompt_length: int | None = Field(default=None, gt=0)

    schema_path: Path | None = None

    log_dir: Path = Field(default=Path("./logs"))
    log_level: str = "INFO"
    log_debug_modules: str = ""
    log_redaction_mode: str = "standard"
    log_payload_preview_chars: int = 2000
    log_max_bytes: int = 20 * 1024 * 1024
    log_backup_count: int = 5

    def cors_allowed_origins_list(self) -> list[str]:
        return _csv_to_list(self.cors_allowed_origins)

    def cors_allowed_methods_list(self) -> list[str]:
        return _csv_to_list(self.cors_allowed_methods)

    def cors_allowed_headers_list(self) -> list[str]:
        return _csv_to_list(self.cors_allowed_headers)

    def log_debug_modules_list(self) -> list[str]:
        return _csv_to_list(self.log_debug_modules)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """构建并缓存 Settings，相对日志目录统一按当前工作目录解析。"""
    settings = Settings()
    if not settings.log_dir.is_absolute():
        settings.log_dir = (Path.cwd() / settings.log_dir).resolve()
    return settings
