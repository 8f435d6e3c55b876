"""凭证值对象 - API Key 与 Service Account 两种形态

凭证形态在进程启动时确定一次（tagged variant），之后每个请求直接使用，
不再重复探测字段。
"""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True, slots=True)
class ApiKeyCredentials:
    """API Key 凭证"""

    api_key: str = field(repr=False)
    auth_type: Literal["API_KEY"] = "API_KEY"


@dataclass(frozen=True, slots=True)
class ServiceAccountCredentials:
    """Service Account 凭证（签发 JWT 换取 bearer token）

    context: 静态上下文（SKYFLOW_CONTEXT_*），写入签名断言的 ctx 声明
    """

    client_id: str
    client_name: str
    token_uri: str
    key_id: str
    private_key: str = field(repr=False)
    context: dict[str, str] = field(default_factory=dict)
    auth_type: Literal["JWT"] = "JWT"


Credentials = ApiKeyCredentials | ServiceAccountCredentials
