"""VaultGatewayService - 网关门面

两个传输适配器（标准 REST 与行索引格式）共用的入口：
校验请求 → 检查表名 → 执行对应的操作用例 → 返回 BatchResult。

配置错误与校验错误都在任何后端调用之前抛出。
"""

from typing import Any

from vault_gateway.application.services.client_cache import VaultClientCache
from vault_gateway.application.use_cases import (
    DetokenizeInput,
    DetokenizeUseCase,
    QueryInput,
    QueryUseCase,
    TokenizeByotInput,
    TokenizeByotUseCase,
    TokenizeInput,
    TokenizeUseCase,
)
from vault_gateway.config import Settings
from vault_gateway.domain.exceptions import ConfigError
from vault_gateway.domain.services import request_validator
from vault_gateway.domain.value_objects.batch_result import BatchResult
from vault_gateway.domain.value_objects.client_key import VaultTarget
from vault_gateway.domain.value_objects.vault_operation import VaultOperation


class VaultGatewayService:
    """网关门面

    依赖：
    - VaultClientCache: 客户端缓存（通过构造函数注入）
    """

    def __init__(
        self,
        client_cache: VaultClientCache,
        *,
        tokenize_batch_size: int = 25,
        detokenize_batch_size: int = 25,
        tokenize_max_concurrency: int = 1,
        detokenize_max_concurrency: int = 1,
    ):
        self.client_cache = client_cache
        self._tokenize = TokenizeUseCase(
            client_cache, tokenize_batch_size, tokenize_max_concurrency
        )
        self._tokenize_byot = TokenizeByotUseCase(
            client_cache, tokenize_batch_size, tokenize_max_concurrency
        )
        self._detokenize = DetokenizeUseCase(
            client_cache, detokenize_batch_size, detokenize_max_concurrency
        )
        self._query = QueryUseCase(client_cache)

    @classmethod
    def from_settings(
        cls,
        client_cache: VaultClientCache,
        settings: Settings,
        batching: dict[str, int] | None = None,
    ) -> "VaultGatewayService":
        """根据配置创建；batching 来自凭证文件时覆盖默认批大小"""
        batching = batching or {}
        return cls(
            client_cache,
            tokenize_batch_size=batching.get("tokenize", settings.tokenize_batch_size),
            detokenize_batch_size=batching.get("detokenize", settings.detokenize_batch_size),
            tokenize_max_concurrency=settings.tokenize_max_concurrency,
            detokenize_max_concurrency=settings.detokenize_max_concurrency,
        )

    async def execute(
        self, operation: VaultOperation, target: VaultTarget, body: Any
    ) -> BatchResult:
        """按操作类型路由"""
        if operation is VaultOperation.TOKENIZE:
            return await self.tokenize(target, body)
        if operation is VaultOperation.TOKENIZE_BYOT:
            return await self.tokenize_byot(target, body)
        if operation is VaultOperation.DETOKENIZE:
            return await self.detokenize(target, body)
        return await self.query(target, body)

    async def tokenize(self, target: VaultTarget, body: Any) -> BatchResult:
        table = _require_table(target, VaultOperation.TOKENIZE)
        records, upsert_column = request_validator.validate_tokenize_request(body)
        return await self._tokenize.execute(
            TokenizeInput(key=target.key, table=table, records=records, upsert_column=upsert_column)
        )

    async def tokenize_byot(self, target: VaultTarget, body: Any) -> BatchResult:
        table = _require_table(target, VaultOperation.TOKENIZE_BYOT)
        records = request_validator.validate_tokenize_byot_request(body)
        return await self._tokenize_byot.execute(
            TokenizeByotInput(key=target.key, table=table, records=records)
        )

    async def detokenize(self, target: VaultTarget, body: Any) -> BatchResult:
        tokens, redaction_type = request_validator.validate_detokenize_request(body)
        return await self._detokenize.execute(
            DetokenizeInput(key=target.key, tokens=tokens, redaction_type=redaction_type)
        )

    async def query(self, target: VaultTarget, body: Any) -> BatchResult:
        sql = request_validator.validate_query_request(body)
        return await self._query.execute(QueryInput(key=target.key, query=sql))


def _require_table(target: VaultTarget, operation: VaultOperation) -> str:
    if operation.requires_table and not target.table:
        raise ConfigError(
            f"Missing required header: X-Skyflow-Table (required for {operation.value})"
        )
    return target.table
