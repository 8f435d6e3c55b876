"""标准 REST 路由

- POST /process           - 通过请求头选择操作，JSON 请求体携带载荷
- POST /processDatabricks - 与 /process 相同的格式

请求头：
- X-Skyflow-Operation: tokenize | tokenize-byot | detokenize | query
- X-Skyflow-Cluster-ID / X-Skyflow-Vault-ID（必需）
- X-Skyflow-Table（tokenize 类操作必需）
- X-Skyflow-Env（可选，默认 PROD）

设计原则：
1. 路由只负责 HTTP 层的事情（读头、读体、组装响应）
2. 业务逻辑在 VaultGatewayService
3. 所有失败都返回带 type 字段的结构化错误体
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from vault_gateway.domain.value_objects.vault_operation import VaultOperation
from vault_gateway.interfaces.api.container import ApiContainer
from vault_gateway.interfaces.api.dependencies.container import get_container
from vault_gateway.interfaces.api.dto import ErrorResponse, ProcessMetadata, ProcessResponse
from vault_gateway.interfaces.api.errors import standard_error_response
from vault_gateway.interfaces.api.utils.headers import parse_request_config
from vault_gateway.interfaces.api.utils.request_body import read_json_body, request_id_from

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Vault"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "ConfigError / ValidationError"},
    500: {"model": ErrorResponse, "description": "UpstreamError / UnknownError"},
}


@router.post("/process", response_model=ProcessResponse, responses=_ERROR_RESPONSES)
@router.post("/processDatabricks", response_model=ProcessResponse, responses=_ERROR_RESPONSES)
async def process(
    request: Request,
    container: ApiContainer = Depends(get_container),
) -> JSONResponse:
    """执行 vault 操作

    业务流程：
    1. 从请求头读取操作与目标（缺失 → ConfigError）
    2. 读取 JSON 请求体
    3. 校验并分批调用后端
    4. 返回 {success, data, metadata, errors?}
    """
    request_id = request_id_from(request)
    logger.info("Request: request_id=%s path=%s", request_id, request.url.path)

    try:
        config = parse_request_config(request.headers)
        target = config.target()
        operation = VaultOperation.parse(config.operation)
        body = await read_json_body(request)

        start = time.perf_counter()
        result = await container.gateway.execute(operation, target, body)
        elapsed = int((time.perf_counter() - start) * 1000)
    except Exception as e:
        return standard_error_response(e, request_id)

    logger.info("Operation completed in %dms: request_id=%s", elapsed, request_id)

    response = ProcessResponse(
        data=result.data,
        metadata=ProcessMetadata(operation=operation.value, duration_ms=elapsed),
        errors=result.errors or None,
    )
    content = response.model_dump()
    if response.errors:
        logger.warning("Operation completed with %d partial failures", len(response.errors))
    else:
        content.pop("errors")

    return JSONResponse(content=content, headers={"X-Request-Id": request_id})
