"""VaultOperationUseCase - 操作用例基类

四个操作（tokenize / tokenize-byot / detokenize / query）共享的部分：
- 通过客户端缓存借出 (cluster, vault, env) 对应的后端句柄
- 每个操作的批大小与并发上限
- 把后端错误包装成操作级异常（TokenizationError 等），保留后端的状态码与详情
"""

import logging

from vault_gateway.application.services.client_cache import VaultClientCache
from vault_gateway.domain.exceptions import UpstreamError, VaultBackendError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 25


class VaultOperationUseCase:
    """操作用例基类

    子类设置：
        error_class: 后端失败时抛出的异常类型
        failure_label: 错误信息前缀（"<label> failed: ..."）
    """

    error_class: type[UpstreamError] = UpstreamError
    failure_label = "Operation"

    def __init__(
        self,
        client_cache: VaultClientCache,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_concurrency: int = 1,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be a positive integer")
        self.client_cache = client_cache
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency

    def _wrap_error(self, error: VaultBackendError) -> UpstreamError:
        logger.error(
            "%s error (vault): http_code=%s grpc_code=%s request_id=%s message=%s",
            self.failure_label,
            error.http_code,
            error.grpc_code,
            error.request_id,
            error.message,
        )
        return self.error_class(
            f"{self.failure_label} failed: {error.message}",
            http_code=error.http_code,
            grpc_code=error.grpc_code,
            details=error.details,
            request_id=error.request_id,
        )
