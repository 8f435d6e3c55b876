"""QueryUseCase - vault SQL 查询用例

单条 SELECT 语句，不分批。返回前去掉内部的 tokenizedData 元数据字段。
"""

import logging
from dataclasses import dataclass

from vault_gateway.application.use_cases.vault_operation import VaultOperationUseCase
from vault_gateway.domain.exceptions import QueryError, VaultBackendError
from vault_gateway.domain.value_objects.batch_result import BatchResult
from vault_gateway.domain.value_objects.client_key import ClientKey

logger = logging.getLogger(__name__)

TOKENIZED_DATA_FIELD = "tokenizedData"


@dataclass
class QueryInput:
    key: ClientKey
    query: str


class QueryUseCase(VaultOperationUseCase):
    error_class = QueryError
    failure_label = "Query"

    async def execute(self, input_data: QueryInput) -> BatchResult:
        logger.info("Query: %s, query=%s...", input_data.key, input_data.query[:100])

        try:
            async with self.client_cache.lease(input_data.key) as client:
                response = await client.query(input_data.query)
        except VaultBackendError as e:
            raise self._wrap_error(e) from e

        cleaned = [
            {name: value for name, value in record.items() if name != TOKENIZED_DATA_FIELD}
            for record in response.fields or []
        ]
        return BatchResult(data=cleaned, errors=response.errors or None)
