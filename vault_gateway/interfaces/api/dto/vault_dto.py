"""Vault DTO - 网关响应数据传输对象

标准端点：
- 成功：{success: true, data, metadata: {operation, duration_ms}, errors?}
- 失败：{success: false, error: {message, type, code, ...}}

行索引端点：
- 成功：{data: [[rowNumber, result], ...]}
- 失败：{error: {message, type, code, ...}}
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProcessMetadata(BaseModel):
    operation: str = Field(..., description="执行的操作")
    duration_ms: int = Field(..., description="操作耗时（毫秒）")


class ProcessResponse(BaseModel):
    """标准端点成功响应"""

    success: bool = Field(default=True)
    data: list[Any] = Field(default_factory=list, description="逐条结果，顺序与输入一致")
    metadata: ProcessMetadata
    errors: list[Any] | None = Field(default=None, description="行级部分失败（仅在存在时返回）")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": [{"skyflow_id": "f1c2...", "email": "tok-4f2a..."}],
                "metadata": {"operation": "tokenize", "duration_ms": 42},
            }
        }
    )


class ErrorDetail(BaseModel):
    """错误详情；upstream 错误额外携带 http_code / grpc_code / details / request_ID"""

    message: str
    type: str = Field(..., description="ConfigError | ValidationError | UpstreamError | UnknownError")
    code: str = Field(..., description="具体异常类名")
    http_code: int | None = None
    grpc_code: int | None = None
    details: Any | None = None
    request_ID: str | None = None


class ErrorResponse(BaseModel):
    success: bool = Field(default=False)
    error: ErrorDetail


class RowIndexedResponse(BaseModel):
    """行索引端点成功响应"""

    data: list[list[Any]] = Field(..., description="[[rowNumber, result], ...]")

    model_config = ConfigDict(
        json_schema_extra={"example": {"data": [[0, "tok-4f2a..."], [7, "tok-91bc..."]]}}
    )


class RowIndexedErrorResponse(BaseModel):
    error: ErrorDetail
