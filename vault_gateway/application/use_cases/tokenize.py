"""TokenizeUseCase - 记录 tokenize 用例

业务场景：
调用方提交一组记录（列名 → 明文值），网关分批写入 vault 并返回每条记录的 token

职责：
1. 通过客户端缓存取得后端句柄
2. 按 batch_size 分批调用 insert（return_tokens=True，不开启 continue_on_error）
3. 可选的单列 upsert
4. 后端失败包装为 TokenizationError
"""

import logging
from dataclasses import dataclass
from typing import Any

from vault_gateway.application.use_cases.vault_operation import VaultOperationUseCase
from vault_gateway.domain.exceptions import TokenizationError, VaultBackendError
from vault_gateway.domain.ports.vault_backend import InsertOptions
from vault_gateway.domain.services.batch_dispatcher import dispatch
from vault_gateway.domain.value_objects.batch_result import BatchResult
from vault_gateway.domain.value_objects.client_key import ClientKey

logger = logging.getLogger(__name__)


@dataclass
class TokenizeInput:
    """tokenize 输入

    属性说明：
    - key: 目标 (cluster, vault, env)
    - table: vault 表名
    - records: 记录列表，列名 → 值
    - upsert_column: upsert 依据的列（可选，只支持单列）
    """

    key: ClientKey
    table: str
    records: list[dict[str, Any]]
    upsert_column: str | None = None


class TokenizeUseCase(VaultOperationUseCase):
    """tokenize 用例

    输出：每条记录为 {列名: token, ..., "skyflow_id": 记录 ID}，顺序与输入一致
    """

    error_class = TokenizationError
    failure_label = "Tokenization"

    async def execute(self, input_data: TokenizeInput) -> BatchResult:
        columns = list(input_data.records[0]) if input_data.records else []
        logger.info(
            "Tokenize: %s, table=%s, columns=[%s], count=%d, batchSize=%d",
            input_data.key,
            input_data.table,
            ", ".join(columns),
            len(input_data.records),
            self.batch_size,
        )

        async def invoke(batch: list[dict[str, Any]]) -> BatchResult:
            return await self._tokenize_batch(input_data, batch)

        return await dispatch(
            input_data.records, self.batch_size, invoke, max_concurrency=self.max_concurrency
        )

    async def _tokenize_batch(
        self, input_data: TokenizeInput, batch: list[dict[str, Any]]
    ) -> BatchResult:
        options = InsertOptions(
            return_tokens=True,
            upsert_column=input_data.upsert_column,
            continue_on_error=False,
        )
        try:
            async with self.client_cache.lease(input_data.key) as client:
                response = await client.insert(input_data.table, batch, options)
        except VaultBackendError as e:
            raise self._wrap_error(e) from e
        return BatchResult(data=response.inserted_fields or [], errors=response.errors or None)
