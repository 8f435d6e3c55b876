"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Vault Gateway", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    env: Literal["development", "production", "test"] = Field(
        default="development", description="运行环境"
    )
    debug: bool = Field(default=False, description="调试模式")

    # Server
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=8000, description="服务器端口")
    reload: bool = Field(default=False, description="热重载")

    # CORS
    cors_origins: list[str] = Field(default=["*"], description="允许的跨域源")

    # Vault backend
    vault_backend: Literal["skyflow", "stub"] = Field(
        default="skyflow", description="后端实现（skyflow: REST API，stub: 内存实现）"
    )
    backend_timeout: float = Field(default=30.0, gt=0, description="单次后端调用超时（秒）")
    client_cache_max_size: int | None = Field(
        default=None, gt=0, description="客户端缓存上限（None 表示不淘汰）"
    )

    # Batching
    tokenize_batch_size: int = Field(default=25, gt=0, description="tokenize 每批记录数")
    detokenize_batch_size: int = Field(default=25, gt=0, description="detokenize 每批 token 数")
    tokenize_max_concurrency: int = Field(
        default=1, gt=0, description="tokenize 并发批次数（1 表示顺序执行）"
    )
    detokenize_max_concurrency: int = Field(
        default=1, gt=0, description="detokenize 并发批次数（1 表示顺序执行）"
    )

    # Credentials（API Key 优先，其次 Service Account，最后回退到 JSON 文件）
    skyflow_api_key: str = Field(default="", description="Skyflow API Key")
    skyflow_client_id: str = Field(default="", description="Service Account clientID")
    skyflow_client_name: str = Field(default="", description="Service Account clientName")
    skyflow_token_uri: str = Field(default="", description="Service Account tokenURI")
    skyflow_key_id: str = Field(default="", description="Service Account keyID")
    skyflow_private_key: str = Field(default="", description="Service Account privateKey (PEM)")
    skyflow_credentials_file: str = Field(
        default="skyflow-config.json", description="凭证 JSON 文件路径（开发环境）"
    )

    # Logging
    log_level: str = Field(default="INFO", description="日志级别")
    log_format: Literal["json", "text"] = Field(default="json", description="日志格式")


# 全局配置实例
settings = Settings()
