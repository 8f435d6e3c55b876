"""行索引路由（数据仓库 external function 格式）

- POST /processSnowflake 及其任意子路径

请求：{"data": [[rowNumber, value], ...]}
响应：{"data": [[rowNumber, result], ...]} 或 {"error": {...}}

调用方会给自定义请求头加上 sf-custom- 前缀，这里剥离前缀后按标准头名读取：
- X-Skyflow-Operation（必需）：tokenize | detokenize
- X-Skyflow-Cluster-ID / X-Skyflow-Vault-ID（必需）
- X-Skyflow-Table / X-Skyflow-Column-Name（tokenize 必需）
- X-Skyflow-Env（可选，默认 PROD）
- X-Skyflow-Redaction-Type（detokenize 可选，不提供时由后端治理策略决定）

每次调用只处理一列数据；多列需要调用方发起多次独立调用。
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from vault_gateway.domain.exceptions import ConfigError
from vault_gateway.domain.services.request_validator import validate_rows
from vault_gateway.domain.value_objects.client_key import VaultTarget
from vault_gateway.domain.value_objects.vault_operation import VaultOperation
from vault_gateway.interfaces.api.container import ApiContainer
from vault_gateway.interfaces.api.dependencies.container import get_container
from vault_gateway.interfaces.api.dto import RowIndexedErrorResponse, RowIndexedResponse
from vault_gateway.interfaces.api.errors import row_indexed_error_response
from vault_gateway.interfaces.api.services.row_correlation import (
    correlate_detokenize,
    correlate_tokenize,
    split_rows,
)
from vault_gateway.interfaces.api.utils.headers import (
    ROW_INDEXED_PREFIX,
    RequestHeaderConfig,
    parse_request_config,
)
from vault_gateway.interfaces.api.utils.request_body import read_json_body, request_id_from

logger = logging.getLogger(__name__)

router = APIRouter(tags=["External Function"])

ROW_INDEXED_OPERATIONS = (VaultOperation.TOKENIZE, VaultOperation.DETOKENIZE)

_ERROR_RESPONSES = {
    400: {"model": RowIndexedErrorResponse, "description": "ConfigError / ValidationError"},
    500: {"model": RowIndexedErrorResponse, "description": "UpstreamError / UnknownError"},
}


@router.post("/processSnowflake", response_model=RowIndexedResponse, responses=_ERROR_RESPONSES)
@router.post(
    "/processSnowflake/{subpath:path}",
    response_model=RowIndexedResponse,
    responses=_ERROR_RESPONSES,
)
async def process_row_indexed(
    request: Request,
    container: ApiContainer = Depends(get_container),
) -> JSONResponse:
    request_id = request_id_from(request)
    logger.info("External function request: request_id=%s path=%s", request_id, request.url.path)

    try:
        config = parse_request_config(request.headers, prefix=ROW_INDEXED_PREFIX)
        target = config.target()
        operation = VaultOperation.parse(config.operation, supported=ROW_INDEXED_OPERATIONS)
        if operation is VaultOperation.TOKENIZE:
            _require_tokenize_headers(config)
        rows = validate_rows(await read_json_body(request))

        start = time.perf_counter()
        if operation is VaultOperation.TOKENIZE:
            data = await _tokenize_rows(container, config, target, rows)
        else:
            data = await _detokenize_rows(container, config, target, rows)
        elapsed = int((time.perf_counter() - start) * 1000)
    except Exception as e:
        return row_indexed_error_response(e, request_id)

    logger.info("Operation completed in %dms: request_id=%s rows=%d", elapsed, request_id, len(data))
    return JSONResponse(
        content=RowIndexedResponse(data=data).model_dump(),
        headers={"X-Request-Id": request_id},
    )


def _require_tokenize_headers(config: RequestHeaderConfig) -> None:
    if not config.table:
        raise ConfigError("Missing required header: X-Skyflow-Table (required for tokenize)")
    if not config.column_name:
        raise ConfigError("Missing required header: X-Skyflow-Column-Name (required for tokenize)")


async def _tokenize_rows(
    container: ApiContainer,
    config: RequestHeaderConfig,
    target: VaultTarget,
    rows: list[tuple],
) -> list[list]:
    """明文 → token；每行构造成单列记录 {column: value}"""
    row_numbers, values = split_rows(rows)
    logger.info("Tokenize rows: table=%s column=%s count=%d", config.table, config.column_name, len(rows))
    result = await container.gateway.tokenize(
        target, {"records": [{config.column_name: value} for value in values]}
    )
    return correlate_tokenize(row_numbers, result, config.column_name)


async def _detokenize_rows(
    container: ApiContainer,
    config: RequestHeaderConfig,
    target: VaultTarget,
    rows: list[tuple],
) -> list[list]:
    """token → 值"""
    row_numbers, tokens = split_rows(rows)
    logger.info("Detokenize rows: count=%d", len(rows))
    body: dict = {"tokens": tokens}
    if config.redaction_type:
        body["options"] = {"redactionType": config.redaction_type}
    result = await container.gateway.detokenize(target, body)
    if result.errors:
        logger.warning(
            "Detokenize rows completed with %d failed tokens (returned as null)",
            len(result.errors),
        )
    return correlate_detokenize(row_numbers, tokens, result)
