"""领域层 Ports - 定义领域层需要的外部依赖接口

- 使用 Protocol 定义接口（结构化子类型）
- Use Case 可以使用 stub 后端进行测试
"""

from vault_gateway.domain.ports.vault_backend import (
    DetokenizeItem,
    DetokenizeOptions,
    DetokenizeResponse,
    InsertOptions,
    InsertResponse,
    QueryResponse,
    VaultBackendPort,
    VaultClientFactory,
)

__all__ = [
    "DetokenizeItem",
    "DetokenizeOptions",
    "DetokenizeResponse",
    "InsertOptions",
    "InsertResponse",
    "QueryResponse",
    "VaultBackendPort",
    "VaultClientFactory",
]
