"""错误响应

把任意异常转换为带稳定 type 字段的 JSON 错误响应：
- GatewayError 子类保持原样（ConfigError / ValidationError / UpstreamError）
- 其他异常包装为 UnknownError（HTTP 500）
"""

import logging

from fastapi.responses import JSONResponse

from vault_gateway.domain.exceptions import GatewayError, UnknownError, UpstreamError
from vault_gateway.interfaces.api.dto import (
    ErrorDetail,
    ErrorResponse,
    RowIndexedErrorResponse,
)

logger = logging.getLogger(__name__)


def to_gateway_error(error: Exception) -> GatewayError:
    if isinstance(error, GatewayError):
        return error
    return UnknownError(str(error) or type(error).__name__)


def _log_error(error: Exception, gateway_error: GatewayError, request_id: str | None) -> None:
    if isinstance(gateway_error, UpstreamError):
        logger.error(
            "Vault API error: request_id=%s code=%s http_code=%s grpc_code=%s vault_request_id=%s message=%s",
            request_id,
            gateway_error.code,
            gateway_error.http_code,
            gateway_error.grpc_code,
            gateway_error.request_id,
            gateway_error.message,
        )
    elif isinstance(error, GatewayError):
        logger.warning(
            "Request rejected: request_id=%s type=%s message=%s",
            request_id,
            gateway_error.error_type,
            gateway_error.message,
        )
    else:
        logger.exception("Application error: request_id=%s", request_id, exc_info=error)


def _detail(gateway_error: GatewayError) -> ErrorDetail:
    return ErrorDetail(**gateway_error.to_dict())


def _headers(request_id: str | None) -> dict[str, str]:
    return {"X-Request-Id": request_id} if request_id else {}


def standard_error_response(error: Exception, request_id: str | None = None) -> JSONResponse:
    """标准端点错误响应：{success: false, error: {...}}"""
    gateway_error = to_gateway_error(error)
    _log_error(error, gateway_error, request_id)
    body = ErrorResponse(error=_detail(gateway_error))
    return JSONResponse(
        status_code=gateway_error.status_code,
        content=body.model_dump(exclude_none=True),
        headers=_headers(request_id),
    )


def row_indexed_error_response(error: Exception, request_id: str | None = None) -> JSONResponse:
    """行索引端点错误响应：{error: {...}}"""
    gateway_error = to_gateway_error(error)
    _log_error(error, gateway_error, request_id)
    body = RowIndexedErrorResponse(error=_detail(gateway_error))
    return JSONResponse(
        status_code=gateway_error.status_code,
        content=body.model_dump(exclude_none=True),
        headers=_headers(request_id),
    )
