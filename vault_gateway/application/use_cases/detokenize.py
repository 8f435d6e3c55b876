"""DetokenizeUseCase - token 还原用例

关键约定：
- redaction_type 只有在调用方显式提供时才写入后端请求
- 未提供时保持后端治理策略生效，本地不补默认值
- 开启 continue_on_error：单个 token 失败以行级错误返回，不中断整批

输出：[{"token": ..., "value": ...}, ...]，顺序与输入 token 顺序一致（行索引适配器依赖此顺序）
"""

import logging
from dataclasses import dataclass

from vault_gateway.application.use_cases.vault_operation import VaultOperationUseCase
from vault_gateway.domain.exceptions import DetokenizationError, VaultBackendError
from vault_gateway.domain.ports.vault_backend import DetokenizeItem, DetokenizeOptions
from vault_gateway.domain.services.batch_dispatcher import dispatch
from vault_gateway.domain.value_objects.batch_result import BatchResult
from vault_gateway.domain.value_objects.client_key import ClientKey
from vault_gateway.domain.value_objects.redaction_type import RedactionType

logger = logging.getLogger(__name__)


@dataclass
class DetokenizeInput:
    key: ClientKey
    tokens: list[str]
    redaction_type: RedactionType | None = None


class DetokenizeUseCase(VaultOperationUseCase):
    error_class = DetokenizationError
    failure_label = "Detokenization"

    async def execute(self, input_data: DetokenizeInput) -> BatchResult:
        redaction = input_data.redaction_type.value if input_data.redaction_type else None
        logger.info(
            "Detokenize: %s, count=%d, batchSize=%d, redactionType=%s",
            input_data.key,
            len(input_data.tokens),
            self.batch_size,
            redaction or "governance-controlled",
        )

        async def invoke(batch: list[str]) -> BatchResult:
            return await self._detokenize_batch(input_data, batch)

        return await dispatch(
            input_data.tokens, self.batch_size, invoke, max_concurrency=self.max_concurrency
        )

    async def _detokenize_batch(self, input_data: DetokenizeInput, batch: list[str]) -> BatchResult:
        items = [DetokenizeItem(token=token, redaction_type=input_data.redaction_type) for token in batch]
        try:
            async with self.client_cache.lease(input_data.key) as client:
                response = await client.detokenize(
                    items, DetokenizeOptions(continue_on_error=True)
                )
        except VaultBackendError as e:
            raise self._wrap_error(e) from e
        data = [
            {"token": record.get("token"), "value": record.get("value")}
            for record in response.detokenized_fields or []
        ]
        return BatchResult(data=data, errors=response.errors or None)
