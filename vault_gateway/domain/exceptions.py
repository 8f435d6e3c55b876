"""领域层异常定义

异常分层：
1. ConfigError：请求头 / 环境值缺失或非法（不会触达后端）
2. ValidationError：请求体格式错误（不会触达后端）
3. UpstreamError：后端调用失败，携带后端返回的状态码与详情
4. UnknownError：其他未预期的错误

每个异常都有稳定的 error_type，API 层据此渲染统一的错误响应，
调用方可以区分"配置错误"和"后端暂时性故障"。
"""

from typing import Any


class GatewayError(Exception):
    """网关异常基类

    属性：
        message: 人类可读的错误信息
        error_type: 稳定的错误类型标识（响应体中的 type 字段）
        status_code: 对应的 HTTP 状态码
    """

    error_type = "GatewayError"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def code(self) -> str:
        """具体异常类名（如 TokenizationError）"""
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "type": self.error_type, "code": self.code}


class ConfigError(GatewayError):
    """配置错误：缺少必需的请求头、环境值非法、凭证缺失等"""

    error_type = "ConfigError"
    status_code = 400


class ValidationError(GatewayError):
    """请求体校验失败

    示例：
        raise ValidationError("records array cannot be empty")
    """

    error_type = "ValidationError"
    status_code = 400


class UpstreamError(GatewayError):
    """后端调用失败

    参数：
        message: 错误信息
        http_code: 后端返回的 HTTP 状态码（可能为空）
        grpc_code: 后端返回的 gRPC 状态码（可能为空）
        details: 后端返回的错误详情
        request_id: 后端请求 ID（用于排查问题）
    """

    error_type = "UpstreamError"

    def __init__(
        self,
        message: str,
        *,
        http_code: int | None = None,
        grpc_code: int | None = None,
        details: Any = None,
        request_id: str | None = None,
    ):
        super().__init__(message)
        self.http_code = http_code
        self.grpc_code = grpc_code
        self.details = details
        self.request_id = request_id

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return self.http_code or 500

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.http_code is not None:
            payload["http_code"] = self.http_code
        if self.grpc_code is not None:
            payload["grpc_code"] = self.grpc_code
        if self.details:
            payload["details"] = self.details
        if self.request_id:
            payload["request_ID"] = self.request_id
        return payload


class VaultBackendError(UpstreamError):
    """后端适配器抛出的原始错误（尚未被操作层包装）"""


class TokenizationError(UpstreamError):
    """tokenize / tokenize-byot 失败"""


class DetokenizationError(UpstreamError):
    """detokenize 失败"""


class QueryError(UpstreamError):
    """query 失败"""


class UnknownError(GatewayError):
    """未预期的错误（HTTP 500）"""

    error_type = "UnknownError"
    status_code = 500
