"""TokenizeByotUseCase - 自带 token 的 tokenize 用例（Bring Your Own Token）

每条输入记录是 {"fields": {...}, "tokens": {...}}，两者列名必须一致（调度前已校验）。
后端分别接收 fields 与自定义 tokens。
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
class TokenizeByotInput:
    key: ClientKey
    table: str
    records: list[dict[str, Any]]


class TokenizeByotUseCase(VaultOperationUseCase):
    error_class = TokenizationError
    failure_label = "Tokenize-BYOT"

    async def execute(self, input_data: TokenizeByotInput) -> BatchResult:
        logger.info(
            "Tokenize-BYOT: %s, table=%s, count=%d, batchSize=%d",
            input_data.key,
            input_data.table,
            len(input_data.records),
            self.batch_size,
        )

        async def invoke(batch: list[dict[str, Any]]) -> BatchResult:
            return await self._tokenize_batch(input_data, batch)

        return await dispatch(
            input_data.records, self.batch_size, invoke, max_concurrency=self.max_concurrency
        )

    async def _tokenize_batch(
        self, input_data: TokenizeByotInput, batch: list[dict[str, Any]]
    ) -> BatchResult:
        options = InsertOptions(
            return_tokens=True,
            token_mode=True,
            tokens=[record["tokens"] for record in batch],
            continue_on_error=False,
        )
        try:
            async with self.client_cache.lease(input_data.key) as client:
                response = await client.insert(
                    input_data.table, [record["fields"] for record in batch], options
                )
        except VaultBackendError as e:
            raise self._wrap_error(e) from e
        return BatchResult(data=response.inserted_fields or [], errors=response.errors or None)
